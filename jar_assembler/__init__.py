"""jar-assembler: merge a classpath into a single runnable jar.

WHY: Shipping a JVM application as one archive means folding every
directory and dependency jar on its classpath into one ZIP container,
without losing the handful of files that several jars legitimately
share (service declarations, data readers, the Log4j2 plugin cache).

HOW: Three-stage pipeline: classify classpath items, copy or merge
every entry into a staging archive, publish the packed archive
atomically. Each stage is independently testable.

RULES:
- Classpath order decides which source owns a clashing entry
- Adding a clash strategy = one handler module plus one table row
- A run with per-entry errors still publishes, but reports failure
"""

__version__ = "0.1.0"

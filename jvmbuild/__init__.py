"""Build JVM applications with Gradle or Maven and keep only the built artifact."""

__version__ = "0.1.0"

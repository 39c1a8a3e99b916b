"""FoodieBuddy - Data models."""

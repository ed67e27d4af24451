"""icsgen: iCalendar generator, importer and validator."""

__version__ = "0.1.0"

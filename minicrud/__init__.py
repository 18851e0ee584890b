"""minicrud: name/email records behind a login, stored in flat JSON files."""

__version__ = "0.1.0"

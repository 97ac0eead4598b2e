"""survey-sync: upload survey responses from spreadsheets to a remote record store."""

__version__ = "0.1.0"

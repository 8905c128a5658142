"""SiteGrade - grade a local business website's ability to convert ad traffic into leads."""

__version__ = "0.1.0"

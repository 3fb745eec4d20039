"""carton - dependency lock reconciliation for Perl module trees."""

__version__ = "0.1.0"

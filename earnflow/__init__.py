"""EarnFlow backend: contact entries, member tree and referral hierarchy API."""

__version__ = "1.0.0"

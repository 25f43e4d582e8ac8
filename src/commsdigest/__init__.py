"""commsdigest - daily rundowns, meeting prep and answers from your communications."""

__version__ = "0.1.0"

"""Bitcoin Influencer Match - pair brands with Bitcoin content creators."""

__version__ = "1.0.0"

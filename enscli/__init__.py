"""
ENS auction client

A command-line client for the Ethereum Name Service auction registrar:
- Starting auctions for available names
- Placing sealed bids with masked escrow
- Revealing bids
- Querying resolvers and auction phases
"""

__version__ = "0.1.0"

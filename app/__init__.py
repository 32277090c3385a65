"""
Job Board Premium Backend
Premium subscriptions and Midtrans payments for the job board.

Architecture:
- PostgreSQL: Structured data (users, subscriptions, transactions, features)
- MongoDB: Payment history documents (raw gateway responses and callbacks)
- Midtrans Snap: Hosted checkout, results arrive by webhook
"""

__version__ = "1.0.0"

from .auth import User, SessionToken
from .catalog import Product
from .ledger import Sale, Expense
from .theme import Theme
from .security import SecurityEvent

__all__ = [
    'User', 'SessionToken',
    'Product',
    'Sale', 'Expense',
    'Theme',
    'SecurityEvent',
]

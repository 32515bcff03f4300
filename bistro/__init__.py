"""
                    Bistro Ordering API

REST backend for a restaurant ordering app: menu browsing, reviews,
shopping cart, user roles and card payments on top of MongoDB.

Author: Khalil_Bannouri
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Khalil_Bannouri"

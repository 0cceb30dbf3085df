"""
Persistence ports for the shopping cart.

A cart persists its full payload after every mutation. The payload carries a
schema version tag; anything stored under a different version (or not shaped
like a cart at all) is discarded on load so stale catalog references never
reach checkout.
"""

import copy
import logging

logger = logging.getLogger(__name__)

CART_SCHEMA_VERSION = 2


class CartStore:
    """
    Storage port used by cart.services.Cart.

    Implementations only move payloads around; validation of the payload
    shape is done by the cart when it loads.
    """

    def load(self):
        raise NotImplementedError("Subclasses must implement load")

    def save(self, payload):
        raise NotImplementedError("Subclasses must implement save")

    def clear(self):
        raise NotImplementedError("Subclasses must implement clear")


class InMemoryCartStore(CartStore):
    """Process-local store, used in tests and scripts."""

    def __init__(self, payload=None):
        self._payload = copy.deepcopy(payload)

    def load(self):
        return copy.deepcopy(self._payload)

    def save(self, payload):
        self._payload = copy.deepcopy(payload)

    def clear(self):
        self._payload = None


class SessionCartStore(CartStore):
    """Stores the cart in the Django session of the current visitor."""

    def __init__(self, session, key="toohot-cart"):
        self.session = session
        self.key = key

    def load(self):
        return copy.deepcopy(self.session.get(self.key))

    def save(self, payload):
        self.session[self.key] = payload
        self.session.modified = True

    def clear(self):
        if self.key in self.session:
            del self.session[self.key]
            logger.debug(f"Cleared session cart {self.key}")

"""Page objects for the practice site."""
from e2e_training.pages.login_page import LoginPage

__all__ = ["LoginPage"]

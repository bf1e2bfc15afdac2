"""Domain initialization and configuration.

Host applications call ``cartkit.init()`` once at start-up, before any cart
event is raised, and run the cart manager inside ``cartkit.domain_context()``.
Importing this module configures logging through ``configure_logging``.
"""

from protean.domain import Domain

from cartkit.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
cartkit = Domain(name="cartkit")

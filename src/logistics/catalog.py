"""
Operation catalog.

Maps string identifiers ("cvs.create", "printing.trade", ...) to builder
classes and seeds every builder with the merchant's credentials and
server URL:

    catalog = OperationCatalog.from_settings(LogisticsSettings.from_env())

    order = catalog.make("cvs.create")
    order.set_merchant_trade_no("ORDER001")...

Applications can register their own builders with alias() (a Content
subclass) or extend() (a factory function), and run shared setup on
every builder with add_initializer().
"""

from typing import Callable, Dict, Iterable, List, Mapping, Type

from shared.checkmac import CheckMacEncoder
from shared.config import Credentials, LogisticsSettings
from shared.constants import Config
from shared.errors import UnknownOperationError

from .content import Content
from .cvs import CancelCvsOrder, CreateCvsOrder, ReturnCvsOrder, UpdateCvsOrder
from .home import CreateHomeOrder, ReturnHomeOrder
from .printing import PrintCvsDocument, PrintTradeDocument
from .queries import GetStoreList, QueryLogisticsOrder
from .store_map import OpenStoreMap


Initializer = Callable[[Content], None]
Resolver = Callable[..., Content]


DEFAULT_OPERATIONS: Dict[str, Type[Content]] = {
    # Store map
    "store_map": OpenStoreMap,

    # Store pickup
    "cvs.create": CreateCvsOrder,
    "cvs.update": UpdateCvsOrder,
    "cvs.cancel": CancelCvsOrder,
    "cvs.return": ReturnCvsOrder,

    # Home delivery
    "home.create": CreateHomeOrder,
    "home.return": ReturnHomeOrder,

    # Queries
    "queries.order": QueryLogisticsOrder,
    "queries.store_list": GetStoreList,

    # Printing
    "printing.trade": PrintTradeDocument,
    "printing.cvs": PrintCvsDocument,
}


def normalize_identifier(identifier: str) -> str:
    return identifier.strip().lower()


class OperationCatalog:
    """
    Builds operation builders by identifier.

    Lookup order: extend() resolvers, then alias() registrations, then
    the built-in operations.
    """

    def __init__(
        self,
        merchant_id: str = "",
        hash_key: str = "",
        hash_iv: str = "",
        server_url: str = None,
        aliases: Mapping[str, Type[Content]] = None,
        initializers: Iterable[Initializer] = None
    ):
        self._credentials = Credentials(merchant_id, hash_key, hash_iv)
        self._server_url = Config.DEFAULT_SERVER_URL
        self._aliases: Dict[str, Type[Content]] = {}
        self._resolvers: Dict[str, Resolver] = {}
        self._initializers: List[Initializer] = []

        if server_url:
            self.set_server_url(server_url)
        for identifier, builder_cls in (aliases or {}).items():
            self.alias(identifier, builder_cls)
        for initializer in initializers or ():
            self.add_initializer(initializer)

    @classmethod
    def from_settings(cls, settings: LogisticsSettings) -> "OperationCatalog":
        """
        Build a catalog from LogisticsSettings.

        Default reply URLs and the platform id from the settings are
        applied to every builder that does not set them itself.
        """
        credentials = settings.credentials
        catalog = cls(
            credentials.merchant_id,
            credentials.hash_key,
            credentials.hash_iv,
            server_url=settings.server_url,
        )
        catalog.add_initializer(settings_initializer(settings))
        return catalog

    # =========================================================================
    # Registration
    # =========================================================================

    def alias(self, identifier: str, builder_cls: Type[Content]) -> "OperationCatalog":
        """Register a Content subclass under an identifier."""
        if not (isinstance(builder_cls, type) and issubclass(builder_cls, Content)):
            raise TypeError(f"{builder_cls!r} must be a Content subclass")
        self._aliases[normalize_identifier(identifier)] = builder_cls
        return self

    def extend(self, identifier: str, resolver: Resolver) -> "OperationCatalog":
        """
        Register a factory function.

        The resolver is called as resolver(catalog, *args) and must return
        a Content instance.
        """
        self._resolvers[normalize_identifier(identifier)] = resolver
        return self

    def add_initializer(self, initializer: Initializer) -> "OperationCatalog":
        """Register a callable run on every builder make() returns."""
        self._initializers.append(initializer)
        return self

    # =========================================================================
    # Credentials and endpoint
    # =========================================================================

    def set_credentials(self, merchant_id: str, hash_key: str, hash_iv: str) -> "OperationCatalog":
        self._credentials = Credentials(merchant_id, hash_key, hash_iv)
        return self

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    def set_server_url(self, url: str) -> "OperationCatalog":
        self._server_url = url.rstrip("/")
        return self

    @property
    def server_url(self) -> str:
        return self._server_url

    def encoder(self) -> CheckMacEncoder:
        """Encoder for the catalog's credentials (for verifying replies)."""
        return CheckMacEncoder(self._credentials.hash_key, self._credentials.hash_iv)

    # =========================================================================
    # Construction
    # =========================================================================

    def identifiers(self) -> List[str]:
        """Every identifier make() accepts."""
        return sorted(set(DEFAULT_OPERATIONS) | set(self._aliases) | set(self._resolvers))

    def make(self, identifier: str, *args) -> Content:
        """
        Build the operation registered under identifier.

        Args:
            identifier: e.g. "cvs.create" (case and surrounding space ignored)
            *args: Constructor arguments; default to the catalog's credentials

        Raises:
            UnknownOperationError if nothing is registered under identifier
            TypeError if a resolver returns something other than Content
        """
        key = normalize_identifier(identifier)

        if key in self._resolvers:
            content = self._resolvers[key](self, *args)
            if not isinstance(content, Content):
                raise TypeError(
                    f"Resolver for {identifier!r} returned {type(content).__name__}, expected Content"
                )
            return self._initialize(content)

        builder_cls = self._aliases.get(key) or DEFAULT_OPERATIONS.get(key)
        if builder_cls is None:
            raise UnknownOperationError(identifier)

        if not args:
            args = (
                self._credentials.merchant_id,
                self._credentials.hash_key,
                self._credentials.hash_iv,
            )
        content = builder_cls(*args)
        content.set_server_url(self._server_url)

        return self._initialize(content)

    def _initialize(self, content: Content) -> Content:
        for initializer in self._initializers:
            initializer(content)
        return content


def settings_initializer(settings: LogisticsSettings) -> Initializer:
    """
    Initializer applying default reply URLs and the platform id.

    Reply URLs only go to operations that take a ServerReplyURL.
    """
    def initialize(content: Content):
        if settings.platform_id:
            content.set_platform_id(settings.platform_id)
        if not content.requires("ServerReplyURL"):
            return
        if settings.server_reply_url and not content.get("ServerReplyURL"):
            content.set_server_reply_url(settings.server_reply_url)
        if settings.client_reply_url and not content.get("ClientReplyURL"):
            content.set_client_reply_url(settings.client_reply_url)

    return initialize


# =============================================================================
# Demo
# =============================================================================

def demo_catalog():
    """Build and sign a store pickup order without sending it."""
    print("=" * 60)
    print("OPERATION CATALOG DEMO")
    print("=" * 60)

    catalog = OperationCatalog("2000132", "5294y06JbISpM5x9", "v77hoKGq4kWxNNIS")

    print("\n1. Registered operations:")
    for identifier in catalog.identifiers():
        print(f"   {identifier}")

    print("\n2. Incomplete order:")
    order = catalog.make("cvs.create").use_fami_c2c()
    print(f"   First problem: {order.find_violation()}")

    print("\n3. Complete order:")
    (
        order
        .set_merchant_trade_no("DEMO0001")
        .set_goods_name("Demo goods")
        .set_goods_amount(500)
        .set_sender("Sender", cell_phone="0911222333")
        .set_receiver("Receiver", cell_phone="0933222111")
        .set_receiver_store_id("006598")
        .set_server_reply_url("https://shop.example.com/logistics/notify")
    )
    form = order.to_form()
    print(f"   POST {form['action']}")
    for key, value in form["fields"].items():
        print(f"   {key} = {value}")

    print("\n4. Wrong carrier for the operation:")
    try:
        catalog.make("home.create").set_logistics_sub_type("FAMIC2C")
    except ValueError as e:
        print(f"   ✓ Correctly rejected: {e}")

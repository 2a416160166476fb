"""
WIREBOX
~~~~~~~~~~~~~~~~~~~~~

Wirebox is an async dependency injection container, binding strings, symbols
and classes to factories, values and singletons, and constructing classes by
resolving their declared dependencies.

>>> import wirebox
>>> container = wirebox.Container()
>>> container.singleton(Database, lambda: Database(dsn))
>>> service = await container.make(UserService)
>>> assert isinstance(service, UserService)

license: MIT, see LICENSE for more details.
"""

from .config import CONSTRUCTOR_KEY as CONSTRUCTOR_KEY
from .container import Container as Container
from .container import ContextBindingsBuilder as ContextBindingsBuilder
from .inject import inject as inject
from .keys import BindingKey as BindingKey
from .keys import Symbol as Symbol
from .module_caller import module_caller as module_caller
from .module_caller import module_importer as module_importer
from .provider import container_provider as container_provider
from .provider import declare as declare
from .resolver import Resolver as Resolver
from .utils.param_utils import MISSING as MISSING
from .utils.param_utils import is_provided as is_provided

VERSION = "0.1.0"

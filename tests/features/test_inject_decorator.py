import pytest

from wirebox import CONSTRUCTOR_KEY, MISSING, Container, inject
from wirebox.errors import InvalidDependencyError
from wirebox.provider import injections


class Config:
    def __init__(self):
        self.env = "test"


class Database:
    def __init__(self):
        self.dsn = "sqlite://"


@inject()
class UserService:
    def __init__(self, db: Database, config: "Config"):
        self.db = db
        self.config = config

    @inject()
    def find(self, db: Database, user_id: int = 1):
        return db, user_id

    @inject()
    @staticmethod
    def build(config: Config):
        return config

    @inject()
    @classmethod
    def create(cls, db: Database):
        return cls, db


class AdminService(UserService): ...


def test_inject_records_constructor_types():
    assert injections.lookup(UserService, CONSTRUCTOR_KEY) == [Database, Config]


def test_inject_records_method_types():
    assert injections.lookup(UserService, "find") == [Database, int]
    assert injections.lookup(UserService, "build") == [Config]
    assert injections.lookup(UserService, "create") == [Database]


def test_inject_restores_original_methods():
    assert UserService.__dict__["find"].__name__ == "find"
    assert isinstance(UserService.__dict__["build"], staticmethod)
    assert isinstance(UserService.__dict__["create"], classmethod)


@pytest.mark.asyncio
async def test_inject_class():
    service = await Container().make(UserService)

    assert isinstance(service.db, Database)
    assert service.config.env == "test"


@pytest.mark.asyncio
async def test_inject_is_inherited():
    admin = await Container().make(AdminService)

    assert isinstance(admin, AdminService)
    assert isinstance(admin.db, Database)


@pytest.mark.asyncio
async def test_inject_methods():
    container = Container()
    service = await container.make(UserService)

    db, user_id = await container.call(service, "find", [MISSING, 42])
    assert isinstance(db, Database)
    assert user_id == 42

    assert isinstance(await container.call(service, "build"), Config)

    cls, db = await container.call(service, "create")
    assert cls is UserService
    assert isinstance(db, Database)


@pytest.mark.asyncio
async def test_primitive_method_slot_needs_value():
    container = Container()
    service = await container.make(UserService)

    with pytest.raises(InvalidDependencyError):
        await container.call(service, "find")


@pytest.mark.asyncio
async def test_inject_overrides():
    @inject(None, "settings")
    class Mailer:
        def __init__(self, db: Database, settings: dict):
            self.db = db
            self.settings = settings

    container = Container()
    container.bind_value("settings", {"from": "noreply"})

    mailer = await container.make(Mailer)
    assert isinstance(mailer.db, Database)
    assert mailer.settings == {"from": "noreply"}


@pytest.mark.asyncio
async def test_untyped_parameter_needs_runtime_value():
    @inject()
    class Greeter:
        def __init__(self, config: Config, name):
            self.config = config
            self.name = name

    container = Container()
    with pytest.raises(InvalidDependencyError):
        await container.make(Greeter)

    greeter = await container.make(Greeter, [MISSING, "virk"])
    assert isinstance(greeter.config, Config)
    assert greeter.name == "virk"


def test_inject_without_constructor():
    @inject()
    class Plain: ...

    assert injections.lookup(Plain, CONSTRUCTOR_KEY) is None


def test_inject_unresolvable_forward_ref():
    @inject()
    class Broken:
        def __init__(self, db: "NotDefinedAnywhere"):  # type: ignore  # noqa: F821
            self.db = db

    with pytest.raises(InvalidDependencyError):
        injections.lookup(Broken, CONSTRUCTOR_KEY)


@pytest.mark.asyncio
async def test_unresolvable_forward_ref_fails_on_make():
    @inject()
    class Broken:
        def __init__(self, db: "NotDefinedAnywhere"):  # type: ignore  # noqa: F821
            self.db = db

    with pytest.raises(InvalidDependencyError):
        await Container().make(Broken)


@pytest.mark.asyncio
async def test_inject_forward_ref_to_later_class():
    notifier = await Container().make(Notifier)

    assert isinstance(notifier.transport, Transport)
    assert isinstance(await Container().call(notifier, "send"), Transport)
    assert injections.lookup(Notifier, "send") == [Transport]


@inject()
class Notifier:
    def __init__(self, transport: "Transport"):
        self.transport = transport

    @inject()
    def send(self, transport: "Transport"):
        return transport


class Transport: ...


def test_inject_rejects_non_callables():
    with pytest.raises(InvalidDependencyError):
        inject()(42)  # type: ignore

from friendchat.setup.ioc.container import (
    AppProvider,
    MemoryStorageProvider,
    create_container,
)

__all__ = ["AppProvider", "MemoryStorageProvider", "create_container"]

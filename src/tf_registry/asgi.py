# SPDX-License-Identifier: MIT
"""ASGI entry point configured from the environment.

    uvicorn tf_registry.asgi:app
"""

from .app import create_app

app = create_app()

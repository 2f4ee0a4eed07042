import os

import uvicorn
from loguru import logger

from chat_studio.main import create_app
from chat_studio.utils import g_config, setup_logging

app = create_app()

if __name__ == "__main__":
    setup_logging(level=g_config.logging.level)

    https = g_config.server.https
    ssl_kwargs = {}
    if https.enabled:
        if not (os.path.exists(https.key_file) and os.path.exists(https.cert_file)):
            logger.error(
                f"HTTPS is enabled but certificate files are missing: {https.key_file}, {https.cert_file}"
            )
            raise SystemExit(1)
        ssl_kwargs = {"ssl_keyfile": https.key_file, "ssl_certfile": https.cert_file}

    logger.info(
        f"Starting server on {'https' if https.enabled else 'http'}://{g_config.server.host}:{g_config.server.port}"
    )
    uvicorn.run(
        app,
        host=g_config.server.host,
        port=g_config.server.port,
        log_config=None,
        **ssl_kwargs,
    )

"""Run the order service: ``python -m order_service`` or the ``order-service`` script."""

import uvicorn

from order_service.config import HOST, LOG_LEVEL, PORT


def main() -> None:
    uvicorn.run("order_service.app:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()

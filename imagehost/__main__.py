"""
Run the service: python -m imagehost
"""

import uvicorn

from imagehost import app, config


def main() -> None:
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()

import argparse
import logging
from pathlib import Path

from .UI import UI
from . import config

def main() -> None:
    parser = argparse.ArgumentParser(prog='category_timers', description=config.APP_NAME)
    parser.add_argument(
        '--data', type=Path, default=config.STORE_PATH,
        help=f'storage file (default: {config.STORE_PATH})',
    )
    args = parser.parse_args()

    # The terminal belongs to Textual.
    config.LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=config.LOG_PATH,
        level=config.LOG_LEVEL,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    UI(store_path=args.data).run()

if __name__ == '__main__':
    main()

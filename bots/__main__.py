"""Entry point for running the giveaway bot via python -m bots"""

import asyncio
import logging

from bots.giveaway import main

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    asyncio.run(main())

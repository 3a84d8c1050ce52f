import logging
import time
from typing import Optional

from pagefetch import config
from pagefetch.container import Container

logger = logging.getLogger(__name__)

DEFAULT_DEMO_URL = "http://xww.hebut.edu.cn/zhxw/72090.htm"


def main(
    container: Optional[Container] = None,
    url: Optional[str] = None,
    iterations: Optional[int] = None,
    delay: Optional[float] = None,
):
    """Fetch one page repeatedly to exercise the shared pool.

    Args:
        container: Optional DI container for testing. If None, creates default container.
        url: Page to fetch. Defaults to PAGEFETCH_DEMO_URL.
        iterations: Number of fetches. Defaults to PAGEFETCH_DEMO_ITERATIONS (100).
        delay: Seconds to sleep between fetches. Defaults to PAGEFETCH_DEMO_DELAY (4.0).
    """
    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        container = Container()

    url = url or config.get_str_env("PAGEFETCH_DEMO_URL", DEFAULT_DEMO_URL)
    iterations = iterations if iterations is not None else config.get_int_env("PAGEFETCH_DEMO_ITERATIONS", 100)
    delay = delay if delay is not None else config.get_float_env("PAGEFETCH_DEMO_DELAY", 4.0)

    fetcher = container.page_fetcher()
    try:
        for i in range(iterations):
            content = fetcher.fetch(url)
            if content is None:
                logger.info("[%d/%d] no content from %s", i + 1, iterations, url)
            else:
                logger.info("[%d/%d] fetched %d characters from %s", i + 1, iterations, len(content), url)
            if i + 1 < iterations:
                time.sleep(delay)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        fetcher.close()


if __name__ == '__main__':
    main()

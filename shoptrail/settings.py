# Scrapy settings for crawlers that feed the shoptrail store
#
# Only settings relevant to storage are declared here; scraper projects
# extend them with their own download and middleware settings.
#
#     https://docs.scrapy.org/en/latest/topics/settings.html

import os
from dotenv import load_dotenv

from shoptrail.utils.logger_config import setup_logging
from shoptrail.utils.sentry import init_sentry

base_dir = os.path.dirname(__file__)
env_path = os.path.join(base_dir, ".env")

load_dotenv(env_path, encoding="utf-8")
setup_logging()
init_sentry()

LOG_ENABLED = False
BOT_NAME = "shoptrail"

# Observations for URLs visited within the rescan cooldown are dropped before storage
RESCAN_GATE_ENABLED = os.getenv("RESCAN_GATE_ENABLED", "true").lower() in ("true", "1", "yes")

# Configure item pipelines
ITEM_PIPELINES = {
   "shoptrail.pipelines.ObservationValidationPipeline": 300,
   "shoptrail.pipelines.StoragePipeline": 400,
}

# Storage is asyncio based
TWISTED_REACTOR = "twisted.internet.asyncioreactor.AsyncioSelectorReactor"
FEED_EXPORT_ENCODING = "utf-8"

import argparse
import asyncio
import importlib
import logging
import os
import signal
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from typesense_indexer.config import settings
from typesense_indexer.contentserver.client import ContentServerClient
from typesense_indexer.core.errors import IndexerError
from typesense_indexer.documents.provider import ContentServerDocumentProvider
from typesense_indexer.documents.registry import default_registry
from typesense_indexer.indexing.indexer import Indexer
from typesense_indexer.revisions.manager import RevisionManager
from typesense_indexer.typesense.client import TypesenseClient

logger = logging.getLogger("indexer.script")


def parse_args():
    parser = argparse.ArgumentParser(description="Rebuild all configured Typesense indices.")
    parser.add_argument(
        "providers",
        nargs="+",
        help="Modules that register document providers on the default registry",
    )
    return parser.parse_args()


async def main(provider_modules):
    for module in provider_modules:
        importlib.import_module(module)
    logger.info("Registered document types: %s", ", ".join(default_registry) or "none")

    revision_manager = RevisionManager(
        TypesenseClient(),
        settings.collections,
        preset=settings.search_preset,
        preset_name=settings.search_preset_name,
    )
    content_client = ContentServerClient()
    indexer = Indexer(
        revision_manager,
        ContentServerDocumentProvider(content_client, default_registry),
    )

    # First Ctrl+C stops after the current index and reverts the build
    cancel_event = asyncio.Event()
    asyncio.get_running_loop().add_signal_handler(signal.SIGINT, cancel_event.set)

    report = await indexer.run(cancel_event=cancel_event)
    print(report.model_dump_json(indent=2))
    return 0 if report.outcome == "committed" else 1


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        sys.exit(asyncio.run(main(args.providers)))
    except IndexerError as exc:
        logger.error("Build failed: %s", exc)
        sys.exit(2)

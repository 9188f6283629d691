"""Command line entry point: `queue-drain --src URL [--dest URL] [--bucket NAME]`.

Runs one drain cycle and exits 0 on success, 1 on any failure.
"""

import argparse
import logging
import sys

from queue_drain import __version__
from queue_drain.config import DrainConfig
from queue_drain.errors import ConfigurationError, DrainError
from queue_drain.logging_filters import configure_logging
from queue_drain.services.pipeline import DrainPipeline

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="queue-drain",
        description=(
            "Move one batch of up to 10 messages from an SQS queue to another "
            "queue and/or an S3 bucket, then delete them from the source."
        ),
    )
    parser.add_argument("--src", help="source queue URL")
    parser.add_argument("--dest", help="destination queue URL")
    parser.add_argument("--bucket", help="destination bucket")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="fail instead of purging when a destination rejects individual messages",
    )
    parser.add_argument("--config", default="config.json", help="JSON config file")
    parser.add_argument("--region", help="AWS region")
    parser.add_argument("--endpoint-url", help="LocalStack endpoint URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = DrainConfig.from_json_file(
            args.config,
            overrides={
                "source_queue": args.src,
                "dest_queue": args.dest,
                "bucket": args.bucket,
                "strict_delivery": args.strict,
                "aws_region": args.region,
                "localstack_endpoint": args.endpoint_url,
            },
        )
        configure_logging(config.log_level.upper(), verbose=args.verbose)
        config.validate_for_run()
    except ConfigurationError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    logger.info("source queue : %s", config.source_queue)
    logger.info("destination queue : %s", config.dest_queue or "")
    logger.info("destination bucket : %s", config.bucket or "")

    try:
        pipeline = DrainPipeline.from_config(config)
        pipeline.run_once()
    except DrainError as e:
        if e.report is not None:
            logger.error("Run aborted: %s", e.report.summary())
        else:
            logger.error("Run aborted: %s", e)
        return EXIT_FAILURE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

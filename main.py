#!/usr/bin/env python3
"""Main entry point for CloudWatch Exporter"""
import sys
from functools import partial
import uvicorn
from config import Config
from app.server import MetricsServer
from collectors.cloudwatch import CloudWatchCollector
from metrics.registry import MetricsRegistry
from metrics.rules import load_rules
from utils.cloudwatch import CloudWatchClient
from logging_config import setup_structured_logging, get_logger, log_server_startup


def build_server(config: Config) -> MetricsServer:
    """Load the rule file and wire the collector into a server"""
    rules = load_rules(config.config_file)
    registry = MetricsRegistry()
    registry.register_collector(CloudWatchCollector(
        rules,
        client_factory=partial(
            CloudWatchClient.create,
            rules.region,
            rules.role_arn,
            config.cloudwatch_maxconnections,
        ),
        request_counter=registry.request_counter,
        worker_count=config.cloudwatch_threads,
        scrape_timeout=config.scrape_timeout_seconds,
    ))
    log_server_startup(get_logger(__name__), config, len(rules.metrics))
    return MetricsServer(config, registry)


def main():
    """Main application entry point"""
    try:
        config = Config()

        setup_structured_logging(config)

        server = build_server(config)

        uvicorn.run(
            server.get_app(),
            host=config.metrics_host,
            port=config.metrics_port,
            log_config=None  # We handle logging ourselves
        )

    except Exception as e:
        get_logger(__name__).error(
            "Exporter failed to start",
            error=str(e),
            error_type=type(e).__name__,
            event_type="startup_failed",
            exc_info=True
        )
        sys.exit(1)


if __name__ == '__main__':
    main()

"""FastAPI server setup and routes"""
import threading
import time
from typing import Dict, List, Optional
from fastapi import FastAPI, Response, HTTPException
from fastapi.responses import HTMLResponse
from collectors.cloudwatch.collector import SCRAPE_DURATION_SECONDS, SCRAPE_ERROR
from metrics.exporters.prometheus import CONTENT_TYPE, PrometheusExporter
from metrics.models import MetricFamily
from metrics.registry import MetricsRegistry
from app.middleware import RequestLoggingMiddleware
from logging_config import get_logger


logger = get_logger(__name__)


def _single_value(families: List[MetricFamily], name: str) -> Optional[float]:
    for family in families:
        if family.name == name and family.samples:
            return family.samples[0].value
    return None


class MetricsServer:
    """FastAPI server exposing CloudWatch metrics to Prometheus"""

    def __init__(self, config, registry: MetricsRegistry):
        self.config = config
        self.registry = registry
        self.exporter = PrometheusExporter()
        self.app = FastAPI(
            title="CloudWatch Exporter",
            version=config.service_version,
            docs_url=None,  # Disable docs for security
            redoc_url=None,  # Disable redoc for security
            openapi_url=None  # Disable OpenAPI schema for security
        )

        # Scrape state, for /health only; /metrics runs in a thread pool
        self._scrape_lock = threading.Lock()
        self.start_time = time.time()
        self.last_scrape_time = 0.0
        self.last_scrape_duration: Optional[float] = None
        self.last_scrape_failed = False
        self.scrape_count = 0

        if self.config.enable_request_logging:
            self.app.add_middleware(RequestLoggingMiddleware)

        self._setup_routes()

    def _setup_routes(self):
        """Setup FastAPI routes"""

        @self.app.get('/metrics', response_class=Response)
        def get_metrics():
            """Scrape CloudWatch and serve the result in Prometheus format"""
            families = self.registry.collect_all()
            self._record_scrape(families)
            return Response(self.exporter.render(families), media_type=CONTENT_TYPE)

        @self.app.get('/health')
        def health_check():
            """Health check endpoint"""
            health_data = self.health()
            if health_data["status"] == "unhealthy":
                raise HTTPException(status_code=503, detail=health_data)
            return health_data

        @self.app.get('/', response_class=HTMLResponse)
        def index():
            """Home page"""
            return self._generate_html_interface()

    def _record_scrape(self, families: List[MetricFamily]) -> None:
        duration = _single_value(families, SCRAPE_DURATION_SECONDS)
        failed = bool(_single_value(families, SCRAPE_ERROR))
        with self._scrape_lock:
            self.scrape_count += 1
            self.last_scrape_time = time.time()
            self.last_scrape_duration = duration
            self.last_scrape_failed = failed

    def health(self) -> Dict:
        with self._scrape_lock:
            count = self.scrape_count
            last_time = self.last_scrape_time
            duration = self.last_scrape_duration
            failed = self.last_scrape_failed
        if not count:
            status = "idle"
        elif failed:
            status = "unhealthy"
        else:
            status = "healthy"
        return {
            "status": status,
            "uptime_seconds": round(time.time() - self.start_time, 1),
            "total_scrapes": count,
            "last_scrape_seconds_ago": round(time.time() - last_time, 1) if count else None,
            "last_scrape_duration_seconds": duration,
            "last_scrape_failed": failed,
            "collectors": self.registry.get_collector_status(),
        }

    def _generate_html_interface(self) -> str:
        """Generate HTML interface"""
        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <title>CloudWatch Exporter</title>
        </head>
        <body>
            <h1>CloudWatch Exporter</h1>
            <p>Version {self.config.service_version}</p>
            <ul>
                <li><a href="/metrics">/metrics</a> - Prometheus metrics</li>
                <li><a href="/health">/health</a> - Health check</li>
            </ul>
        </body>
        </html>
        """

    def get_app(self) -> FastAPI:
        """Get the FastAPI application"""
        return self.app

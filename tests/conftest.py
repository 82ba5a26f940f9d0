"""Fixtures partagées des tests du reporter."""

import pytest

from plugin_reporter.core.config import ReporterConfig
from plugin_reporter.core.logger import ReporterLogger
from plugin_reporter.host import StaticHost
from plugin_reporter.main import PluginReporterService

from .helpers import ENDPOINT, SECRET


@pytest.fixture
def config():
    return ReporterConfig.in_memory({
        'reporter': {'endpoint': ENDPOINT, 'secret': SECRET, 'site_url': 'https://fallback.example.test'},
        'logging': {'log_file': '', 'log_level': 'DEBUG'},
    })


@pytest.fixture
def logger(config):
    return ReporterLogger(config)


@pytest.fixture
def host():
    return StaticHost(
        plugins={
            'akismet/akismet.php': {'name': 'Akismet Anti-spam', 'version': '5.3'},
            'hello.php': {'name': 'Hello Dolly', 'version': '1.7.2'},
            'wordpress-seo/wp-seo.php': {'name': 'Yoast SEO', 'version': '21.0'},
        },
        active_plugins={'akismet/akismet.php', 'wordpress-seo/wp-seo.php'},
        auto_update_plugins={'wordpress-seo/wp-seo.php'},
        update_plugins={'akismet/akismet.php': '5.3.1'},
        site_url='https://site.example.test',
        platform_version='6.4.2',
    )


@pytest.fixture
def service(config, host):
    return PluginReporterService(config=config, host=host)


@pytest.fixture
def web_app(service):
    web_app = service.create_web_app()
    web_app.app.config['TESTING'] = True
    return web_app


@pytest.fixture
def client(web_app):
    return web_app.app.test_client()

import yaml
import pytest
from ccompose.PARSERS.compose_parser import ComposeParser
from ccompose.exceptions import ConfigError

def test_parse(tmp_path):
    compose_content = {
        'services': {
            'web': {
                'image': 'nginx:latest',
                'platform': 'linux/arm64',
                'ports': ['80:80', 443],
                'environment': ['DEBUG=true', 'LEVEL=2'],
                'working_dir': '/srv',
                'command': 'nginx -g daemon',
                'deploy': {'resources': {'limits': {'memory': '512m'}}},
            },
            'db': {
                'image': 'postgres:13',
                'volumes': ['./db_data:/var/lib/postgresql/data'],
                'command': ['postgres', '-c', 'fsync=off'],
            }
        },
    }

    compose_file = tmp_path / "docker-compose.yml"
    with open(compose_file, 'w') as f:
        yaml.dump(compose_content, f, sort_keys=False)

    parser = ComposeParser(context={})
    config = parser.parse(str(compose_file))

    assert list(config.services) == ['web', 'db']
    web = config.services['web']
    assert web.name == 'web'
    assert web.image == 'nginx:latest'
    assert web.platform == 'linux/arm64'
    assert web.ports == ['80:80', '443']
    assert web.environment == ['DEBUG=true', 'LEVEL=2']
    assert web.working_dir == '/srv'
    assert web.command == 'nginx -g daemon'
    assert web.memory_limit == '512m'

    db = config.services['db']
    assert db.volumes == ['./db_data:/var/lib/postgresql/data']
    assert db.command == ['postgres', '-c', 'fsync=off']
    assert db.memory_limit is None
    assert db.platform is None

def test_environment_mapping_form():
    content = """
services:
  app:
    image: app
    environment:
      DEBUG: true
      PORT: 8080
      FROM_HOST:
"""
    config = ComposeParser(context={}).parse_from_string(content)
    assert config.services['app'].environment == ['DEBUG=true', 'PORT=8080', 'FROM_HOST']

def test_long_volume_and_port_syntax():
    content = """
services:
  app:
    image: app
    volumes:
      - type: bind
        source: ./conf
        target: /etc/app
        read_only: true
      - /var/log
    ports:
      - target: 80
        published: 8080
"""
    config = ComposeParser(context={}).parse_from_string(content)
    app = config.services['app']
    assert app.volumes == ['./conf:/etc/app:ro', '/var/log']
    assert app.ports == ['8080:80']

def test_mem_limit_fallback():
    config = ComposeParser(context={}).parse_from_string("services:\n  a:\n    image: x\n    mem_limit: 1g\n")
    assert config.services['a'].memory_limit == '1g'

def test_numeric_service_name():
    config = ComposeParser(context={}).parse_from_string("services:\n  1:\n    image: x\n")
    assert config.services['1'].name == '1'

def test_empty_file():
    assert ComposeParser(context={}).parse_from_string("").services == {}

def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        ComposeParser().parse(str(tmp_path / "docker-compose.yml"))

def test_invalid_yaml():
    with pytest.raises(ConfigError):
        ComposeParser(context={}).parse_from_string("services: [unclosed")

def test_not_a_mapping():
    with pytest.raises(ConfigError):
        ComposeParser(context={}).parse_from_string("- just\n- a list\n")

def test_missing_image():
    with pytest.raises(ConfigError, match="web"):
        ComposeParser(context={}).parse_from_string("services:\n  web:\n    command: x\n")

def test_service_not_a_mapping():
    with pytest.raises(ConfigError):
        ComposeParser(context={}).parse_from_string("services:\n  web: nginx\n")

def test_interpolation_from_context():
    content = "services:\n  web:\n    image: nginx:${TAG:-latest}\n    environment:\n      - HOST=${HOST}\n"
    config = ComposeParser(context={'HOST': 'example.org'}).parse_from_string(content)
    assert config.services['web'].image == 'nginx:latest'
    assert config.services['web'].environment == ['HOST=example.org']

def test_dotenv_file_next_to_compose_file(tmp_path, monkeypatch):
    monkeypatch.delenv('TAG', raising=False)
    monkeypatch.setenv('REGISTRY', 'from-process')
    (tmp_path / '.env').write_text("TAG=1.2\nREGISTRY=from-dotenv\n")
    compose_file = tmp_path / 'docker-compose.yml'
    compose_file.write_text("services:\n  web:\n    image: ${REGISTRY}/web:${TAG}\n")

    config = ComposeParser().parse(str(compose_file))
    assert config.services['web'].image == 'from-process/web:1.2'

def test_required_variable():
    with pytest.raises(ConfigError, match="TAG is needed"):
        ComposeParser(context={}).parse_from_string("services:\n  web:\n    image: web:${TAG:?TAG is needed}\n")

def test_large_config_parsing():
    content = "services:\n"
    for i in range(1000):
        content += f"  service_{i}:\n"
        content += f"    image: image_{i}\n"
        content += f"    environment:\n"
        content += f"      - VAR_{i}=VALUE_{i}\n"

    config = ComposeParser(context={}).parse_from_string(content)
    assert len(config.services) == 1000
    assert config.services['service_999'].environment == ['VAR_999=VALUE_999']

def test_environment_mapping_non_string_key_without_value():
    content = "services:\n  app:\n    image: app\n    environment:\n      1:\n      2: two\n"
    config = ComposeParser(context={}).parse_from_string(content)
    assert config.services['app'].environment == ['1', '2=two']

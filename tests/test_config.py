import textwrap

import pytest

from notion_gallery.config import (
    AppConfig,
    parse_app_config,
    parse_env_config,
    read_access_settings,
)
from notion_gallery.schema import PropertyCandidate


def test_parse_env_config(tmp_path):
    env_file = tmp_path / "env.xml"
    env_file.write_text(
        textwrap.dedent("""
            <environment>
                <variable name="NOTION_TOKEN">secret_abc</variable>
                <variable name="ALLOWED_DATABASE_IDS">abc,def</variable>
            </environment>
        """),
        encoding="utf-8",
    )

    env_vars = parse_env_config(str(env_file))
    assert env_vars["NOTION_TOKEN"] == "secret_abc"
    assert env_vars["ALLOWED_DATABASE_IDS"] == "abc,def"


def test_parse_app_config(tmp_path):
    config_file = tmp_path / "config.xml"
    env_file = tmp_path / "env.xml"
    log_file = tmp_path / "logs" / "app.log"
    env_file.touch()

    config_file.write_text(
        textwrap.dedent("""
            <config>
                <env>env.xml</env>
                <server>
                    <host>127.0.0.1</host>
                    <port>8080</port>
                </server>
                <feed>
                    <default-limit>12</default-limit>
                    <poll-interval>45</poll-interval>
                    <status-property>State</status-property>
                    <date-property>Shot On</date-property>
                </feed>
                <schema>
                    <title><property>Headline</property></title>
                    <caption><property>Notes</property></caption>
                    <media>
                        <property>Gallery</property>
                        <property>Attachments</property>
                    </media>
                </schema>
                <notion>
                    <version>2025-01-01</version>
                    <timeout>4.5</timeout>
                </notion>
                <logging>
                    <level>DEBUG</level>
                    <file>logs/app.log</file>
                </logging>
            </config>
        """),
        encoding="utf-8",
    )

    config = parse_app_config(str(config_file))

    assert isinstance(config, AppConfig)
    assert config.env_file == str(env_file.resolve())
    assert config.server.host == "127.0.0.1"
    assert config.server.port == 8080
    assert config.feed.default_limit == 12
    assert config.feed.poll_interval == 45.0
    assert config.schema.media == ["Gallery", "Attachments"]
    assert config.notion.version == "2025-01-01"
    assert config.notion.timeout == 4.5
    assert config.logging.level == "DEBUG"
    assert config.logging.file == str(log_file.resolve())

    profile = config.build_profile()
    assert profile.media_fields[:2] == ("Gallery", "Attachments")
    assert profile.title[0] == PropertyCandidate("Headline", "title")
    assert profile.caption[0] == PropertyCandidate("Notes", "rich_text")
    assert profile.status_property == "State"
    assert profile.date_property == "Shot On"


def test_parse_app_config_minimal(tmp_path):
    config_file = tmp_path / "minimal.xml"
    config_file.write_text("<config />", encoding="utf-8")

    config = parse_app_config(str(config_file))

    assert config.env_file is None
    assert config.server.port == 3000
    assert config.feed.default_limit == 30
    assert config.build_profile().status_property == "Status"


def test_parse_app_config_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_app_config(str(tmp_path / "missing.xml"))


def test_parse_app_config_rejects_non_positive_poll_interval(tmp_path):
    config_file = tmp_path / "config.xml"
    config_file.write_text(
        "<config><feed><poll-interval>0</poll-interval></feed></config>", encoding="utf-8"
    )

    with pytest.raises(ValueError):
        parse_app_config(str(config_file))


def test_read_access_settings_masks_token():
    settings = read_access_settings(
        {"NOTION_TOKEN": "secret_abc", "ALLOWED_DATABASE_IDS": " a-b-c , def"}
    )

    assert settings.allow_list == ["a-b-c", "def"]
    assert settings.masked() == {"notion_token": "***MASKED***", "allowed_raw": " a-b-c , def"}
    assert read_access_settings({}).notion_token is None

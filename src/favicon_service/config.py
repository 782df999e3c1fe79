import typing

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, JsonConfigSettingsSource

DEFAULT_PORT: int = 3000
DEFAULT_MAX_BODY_SIZE: int = 10 * 1024 * 1024


class AppSettings(BaseSettings):
    """ Application settings """

    auth_token: str = Field(min_length=1)
    """ Bearer token every request to /favicon must carry, required """

    host: str = '0.0.0.0'
    """ Host to listen on, 0.0.0.0 by default """

    port: int = DEFAULT_PORT
    """ Port to listen on, 3000 by default """

    fetch_timeout: float = Field(default=10.0, gt=0)
    """ Timeout for downloading remote images, in seconds. 10 seconds by default """

    max_body_size: int = Field(default=DEFAULT_MAX_BODY_SIZE, gt=0)
    """ Max size of JSON and url-encoded request bodies, in bytes. 10MB by default """

    log_level: str = 'info'
    """ Logging level. Options: critical, error, warning, info, debug, trace. Default: info """

    log_fmt: str = "{time} | {level}: {extra} {message}"
    """ Logging message format """

    uvicorn: dict[str, typing.Any] = Field(default_factory=dict[str, typing.Any])
    """ uvicorn specific settings """

    model_config = SettingsConfigDict(env_file=".env", nested_model_default_partial_update=True,
                                      env_nested_delimiter="__", extra='ignore', case_sensitive=False,
                                      json_file="config.json")

    # noinspection PyNestedDecorators
    @model_validator(mode='before')
    @classmethod
    def before_validator(cls, data: typing.Any) -> typing.Any:
        result = data
        if isinstance(data, dict):
            raw_dict = dict(data)

            uvicorn_settings = dict(raw_dict.get('uvicorn', None) or dict[str, typing.Any]())
            uvicorn_settings.setdefault('host', raw_dict.get('host', '0.0.0.0'))
            uvicorn_settings.setdefault('port', int(raw_dict.get('port', DEFAULT_PORT)))
            uvicorn_settings.setdefault('proxy_headers', True)
            raw_dict['uvicorn'] = uvicorn_settings

            result = raw_dict

        return result

    @classmethod
    def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, JsonConfigSettingsSource(
            settings_cls), dotenv_settings, file_secret_settings


_app_settings: AppSettings | None = None


def get_app_settings() -> AppSettings:
    global _app_settings
    if not _app_settings:
        _app_settings = AppSettings()
    return _app_settings

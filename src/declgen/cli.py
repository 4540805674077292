from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)
from typing import Optional, List, Any, Tuple, Type
from . import settings


ENV_PREFIX = "DECLGEN_"


# Settings parsing helpers
class CliOption(BaseModel):
    """Represents a single command-line option."""

    flag: str
    description: str
    is_required: bool
    default_value: Any


def load_settings(
    cli: bool = False,
    env_prefix: Optional[str] = ENV_PREFIX,
    env_file: Optional[str] = None,
    toml_file: Optional[str] = None,
    json_file: Optional[str] = None,
    **kwargs,
) -> settings.GeneratorSettings:
    """
    Build ``GeneratorSettings`` from keyword overrides, the environment
    (``DECLGEN_*``), and optional env/TOML/JSON files.
    """
    config_dict = SettingsConfigDict(
        cli_parse_args=cli,
        env_prefix=env_prefix or "",
        env_file=env_file,
        toml_file=toml_file,
        json_file=json_file,
    )

    class Settings(settings.GeneratorSettings):
        model_config = config_dict

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: Type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> Tuple[PydanticBaseSettingsSource, ...]:
            # File sources are only read when explicitly registered
            sources: List[PydanticBaseSettingsSource] = [
                init_settings,
                env_settings,
                dotenv_settings,
            ]
            if toml_file:
                sources.append(TomlConfigSettingsSource(settings_cls))
            if json_file:
                sources.append(JsonConfigSettingsSource(settings_cls))
            sources.append(file_secret_settings)
            return tuple(sources)

    return Settings(**kwargs)


def iter_settings(model: Type[BaseModel], *, kebab: bool = True) -> List[CliOption]:
    """
    Return a `CliOption` for every field of the flat settings *model*.
    """
    out: List[CliOption] = []
    for name, field in model.model_fields.items():
        flag = name.replace("_", "-") if kebab else name
        out.append(
            CliOption(
                flag=f"--{flag}",
                description=field.description or "",
                is_required=field.is_required(),
                default_value=field.get_default(call_default_factory=True)
                if not field.is_required()
                else ...,
            )
        )
    return sorted(out, key=lambda o: o.flag)


def format_help(model: Type[BaseModel], script_name: str, kebab: bool = True) -> str:
    lines = [f"usage: {script_name} [OPTIONS]", "", "Options:"]
    for opt in iter_settings(model, kebab=kebab):
        line = f"  {opt.flag:<28} {opt.description}"
        details = []
        if opt.is_required:
            details.append("required")
        if opt.default_value is not ...:
            details.append(f"default: {opt.default_value!r}")
        if details:
            line += f" [{', '.join(details)}]"
        lines.append(line)
    return "\n".join(lines)


def print_help(model: Type[BaseModel], script_name: str, kebab: bool = True):
    """Print a formatted help message for a Pydantic settings model."""
    print(format_help(model, script_name, kebab=kebab))

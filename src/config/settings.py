"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use NUT_ prefix (e.g., NUT_STRICT_MODE=true).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use NUT_ prefix.

    Examples:
        NUT_CONTENT_TAG_OPEN=[[
        NUT_CONTENT_TAG_CLOSE=]]
        NUT_STRICT_MODE=true
    """

    model_config = SettingsConfigDict(
        env_prefix="NUT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Tag delimiters
    content_tag_open: str = Field(default="{{", description="Opening delimiter of an echo tag")
    content_tag_close: str = Field(default="}}", description="Closing delimiter of an echo tag")
    directive_tag_open: str = Field(default="{@", description="Opening delimiter of a directive tag")
    directive_tag_close: str = Field(default="}", description="Closing delimiter of a directive tag")
    comment_tag_open: str = Field(default="{{--", description="Opening delimiter of a comment tag")
    comment_tag_close: str = Field(default="--}}", description="Closing delimiter of a comment tag")

    # Host code syntax
    code_open: str = Field(
        default="<?php",
        description="Marker that switches the renderer from literal text into code",
    )

    code_close: str = Field(
        default="?>",
        description="Marker that switches the renderer from code back into literal text",
    )

    variable_sigil: str = Field(
        default="$",
        description="Prefix the host runtime uses for variable references",
    )

    # Compilation configuration
    strict_mode: bool = Field(
        default=False,
        description="Strict mode: malformed directives raise instead of emitting a diagnostic",
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug output during compilation",
    )

    # Batch configuration
    template_suffix: str = Field(
        default=".nut",
        description="File suffix of template sources picked up by the CLI",
    )

    output_suffix: str = Field(
        default=".php",
        description="File suffix of compiled templates written by the CLI",
    )

    def fragment_make(self, code: str) -> str:
        """
        Wrap host code in the embedded-code markers.

        Args:
            code: Host code statement(s)

        Returns:
            Code fragment ready to be spliced into the document

        Example:
            >>> settings = AppSettings()
            >>> settings.fragment_make("} else {")
            '<?php } else { ?>'
        """
        return f"{self.code_open} {code} {self.code_close}"

    def variable_make(self, name: str) -> str:
        """
        Turn a bare identifier into a host variable reference.

        Example:
            >>> AppSettings().variable_make("user")
            '$user'
        """
        return f"{self.variable_sigil}{name}"


# Singleton instance - import this in your code
appsettings = AppSettings()

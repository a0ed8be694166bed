"""Azure CLI Extension: az ideafy — stream and display startup-idea analyses."""

try:
    from azure.cli.core import AzCommandsLoader
except ImportError:
    # Azure CLI not installed: the stream and result modules can still be
    # imported standalone (e.g. to normalize captured output in a script).
    AzCommandsLoader = None  # type: ignore[assignment,misc]

if AzCommandsLoader is not None:
    from azext_ideafy._help import helps  # type: ignore[attr-defined]  # noqa: F401

    class IdeafyCommandsLoader(AzCommandsLoader):
        """Command loader for az ideafy extension."""

        def __init__(self, cli_ctx=None):
            from azure.cli.core.commands import CliCommandType

            ideafy_custom = CliCommandType(operations_tmpl="azext_ideafy.custom#{}")
            super().__init__(cli_ctx=cli_ctx, custom_command_type=ideafy_custom)

        def load_command_table(self, args):
            from azext_ideafy.commands import load_command_table

            load_command_table(self, args)
            return self.command_table

        def load_arguments(self, command):
            from azext_ideafy._params import load_arguments

            load_arguments(self, command)

    COMMAND_LOADER_CLS = IdeafyCommandsLoader

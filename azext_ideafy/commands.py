"""Command table registration for az ideafy."""


def load_command_table(self, _):
    """Register all ideafy commands."""

    with self.command_group("ideafy", is_preview=True) as g:
        g.custom_command("analyze", "ideafy_analyze")
        g.custom_command("normalize", "ideafy_normalize")

    with self.command_group("ideafy config", is_preview=True) as g:
        g.custom_command("init", "ideafy_config_init")
        g.custom_command("show", "ideafy_config_show")
        g.custom_command("get", "ideafy_config_get")
        g.custom_command("set", "ideafy_config_set")

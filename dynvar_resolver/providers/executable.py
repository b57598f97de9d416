from dynvar_resolver.interfaces.provider import BaseProvider


class ExecutableProvider(BaseProvider):
    """
    The output of a process. The executable path, its working directory and
    each argument may reference other variables.
    """

    required_params = ("executable",)
    optional_params = ("dir", "type", "stderr")
    list_params = ("args",)
    choices = {"type": ("process", "shell"), "stderr": ("true", "false")}

    def get_type_name(self) -> str:
        return "executable"

import re

VAULT_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9-]{1,22}[A-Za-z0-9]$")


class Sanitization:
    """
    Validation for names that Azure accepts in resource paths.
    """

    @staticmethod
    def vault_name(value: str) -> str:
        """
        Validate a Key Vault name:
        - 3-24 characters long
        - Must start with a letter
        - Must end with a letter or digit
        - Only alphanumerics and hyphens
        - No consecutive hyphens

        Returns:
            str: The stripped name.

        Raises:
            TypeError: If value is not a string.
            ValueError: If the name breaks any rule.
        """
        if not isinstance(value, str):
            raise TypeError("Sanitization.vault_name: input must be a string")
        value = value.strip()
        if not VAULT_NAME.match(value) or "--" in value:
            raise ValueError(
                f"Invalid vault name '{value}': use 3-24 letters, digits and single hyphens, "
                f"starting with a letter and ending with a letter or digit."
            )
        return value


vault_name = Sanitization.vault_name

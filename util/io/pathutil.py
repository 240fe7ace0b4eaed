from pathlib import Path


class PathUtil:
    @staticmethod
    def ensure_path(
            path: str | Path,
            is_file: bool = False,
            create: bool = False,
    ) -> tuple[Path, bool]:
        """
        Ensure that a file or directory exists at the given path.

        Args:
            path (str | Path): The path to validate or create.
            is_file (bool): If True, treat path as a file (creates parent directory).
            create (bool): If True, attempt to create the path if it doesn't exist.

        Returns:
            tuple[Path, bool]: The normalized path and whether it existed or was created.
        """
        path = Path(path)

        if path.exists():
            return path, True

        if not create:
            return path, False

        try:
            if is_file:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.touch(exist_ok=True)
            else:
                path.mkdir(parents=True, exist_ok=True)
            return path, True
        except OSError:
            return path, False


ensure_path = PathUtil.ensure_path
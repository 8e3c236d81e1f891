"""Ошибка формата файла – единственный тип фатальной ошибки импорта."""


class FileFormatError(ValueError):
    """Файл повреждён, не поддерживается или содержит неверные данные."""

    def __init__(self, message: str, line_no: int = None):
        self.message = message
        self.line_no = line_no
        super().__init__(message)

    def __str__(self):
        if self.line_no is not None and "line" not in self.message:
            return f"{self.message} (line {self.line_no})"
        return self.message


def at_line(line_no):
    """Хвост сообщения " on line N" (пусто, если номер строки неизвестен)."""
    return f" on line {line_no}" if line_no is not None else ""

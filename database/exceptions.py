# database/exceptions.py


class StoreError(Exception):
    """Falha ao executar uma consulta no banco (conexão, consulta malformada, restrição)."""


class NotFoundError(StoreError):
    """Uma busca por ID não resolveu para exatamente uma linha."""


class ValidationError(StoreError):
    """Campo obrigatório ausente, coluna desconhecida ou restrição do banco violada."""


class InvalidCredentials(Exception):
    """Email ou senha incorretos. A mensagem é a mesma para os dois casos."""

    def __init__(self, message: str = "Email ou senha incorretos"):
        super().__init__(message)

"""Erros de domínio da loja. O handler em indiejz.main devolve todos no mesmo formato JSON."""


class StoreError(Exception):
    status_code = 400
    default_message = "Requisição inválida."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(StoreError):
    status_code = 400
    default_message = "Requisição inválida."


class NotFound(StoreError):
    status_code = 404
    default_message = "Não encontrado."


class GameNotFound(NotFound):
    default_message = "Jogo não encontrado."


class FileUnavailable(NotFound):
    default_message = "Arquivo do jogo indisponível."


class CouponError(StoreError):
    status_code = 422
    default_message = "Cupom inválido."


class CouponNotFound(CouponError):
    status_code = 404
    default_message = "Cupom inválido."


class CouponExpired(CouponError):
    default_message = "Este cupom expirou."


class CouponExhausted(CouponError):
    default_message = "Este cupom atingiu o limite de usos."


class CouponNotApplicable(CouponError):
    default_message = "Este cupom não é válido para este jogo."


class ProviderError(StoreError):
    """Falha no provedor de pagamento ou de e-mail; a mensagem original vai junto para diagnóstico."""

    status_code = 502
    default_message = "Erro no provedor de pagamento."


class CheckoutCreationFailed(ProviderError):
    default_message = "Não foi possível iniciar o pagamento."


class PaymentNotConfigured(StoreError):
    status_code = 503
    default_message = "Pagamento indisponível no momento."

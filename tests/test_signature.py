"""Tests for MoMo request signing."""

from storefront.payments import (
    CONFIRMATION_FIELDS,
    INITIATION_FIELDS,
    canonical_string,
    sign,
    verify,
)

SECRET = "test-secret"


def _confirmation() -> dict:
    return {
        "accessKey": "test-access",
        "amount": 430000,
        "extraData": "",
        "message": "Successful.",
        "orderId": "MOMOTESTabc",
        "orderInfo": "Payment for order #1",
        "orderType": "momo_wallet",
        "partnerCode": "MOMOTEST",
        "payType": "qr",
        "requestId": "MOMOTESTabc",
        "responseTime": 1700000000000,
        "resultCode": 0,
        "transId": 4088878653,
    }


class TestCanonicalString:
    def test_initiation_order_and_format(self):
        values = {
            "requestType": "captureWallet",
            "requestId": "r1",
            "redirectUrl": "https://shop.test/return",
            "partnerCode": "MOMOTEST",
            "orderInfo": "Payment for order #7",
            "orderId": "r1",
            "ipnUrl": "https://shop.test/ipn?x=1&y=2",
            "extraData": "",
            "amount": 430000,
            "accessKey": "ak",
            "lang": "vi",
        }

        assert canonical_string(INITIATION_FIELDS, values) == (
            "accessKey=ak&amount=430000&extraData=&ipnUrl=https://shop.test/ipn?x=1&y=2"
            "&orderId=r1&orderInfo=Payment for order #7&partnerCode=MOMOTEST"
            "&redirectUrl=https://shop.test/return&requestId=r1&requestType=captureWallet"
        )

    def test_confirmation_field_order(self):
        text = canonical_string(CONFIRMATION_FIELDS, _confirmation())

        keys = [pair.split("=", 1)[0] for pair in text.split("&")]
        assert keys == list(CONFIRMATION_FIELDS)


class TestSign:
    def test_known_vector(self):
        assert (
            sign("key", "The quick brown fox jumps over the lazy dog")
            == "f7bc83f430538424b13298e6aa6fb143ef4d59a14946175997479dbc2d1a3cd8"
        )

    def test_lowercase_hex(self):
        signature = sign(SECRET, "anything")

        assert len(signature) == 64
        assert signature == signature.lower()


class TestVerify:
    def test_accepts_own_signature(self):
        payload = _confirmation()
        signature = sign(SECRET, canonical_string(CONFIRMATION_FIELDS, payload))

        assert verify(SECRET, CONFIRMATION_FIELDS, payload, signature)

    def test_rejects_altered_amount(self):
        payload = _confirmation()
        signature = sign(SECRET, canonical_string(CONFIRMATION_FIELDS, payload))

        tampered = {**payload, "amount": 1000}

        assert not verify(SECRET, CONFIRMATION_FIELDS, tampered, signature)

    def test_rejects_any_single_field_change(self):
        payload = _confirmation()
        signature = sign(SECRET, canonical_string(CONFIRMATION_FIELDS, payload))

        for key in CONFIRMATION_FIELDS:
            tampered = {**payload, key: f"{payload[key]}x"}
            assert not verify(SECRET, CONFIRMATION_FIELDS, tampered, signature), key

    def test_rejects_wrong_secret(self):
        payload = _confirmation()
        signature = sign("other-secret", canonical_string(CONFIRMATION_FIELDS, payload))

        assert not verify(SECRET, CONFIRMATION_FIELDS, payload, signature)

    def test_missing_field_or_signature(self):
        payload = _confirmation()
        signature = sign(SECRET, canonical_string(CONFIRMATION_FIELDS, payload))
        del payload["transId"]

        assert not verify(SECRET, CONFIRMATION_FIELDS, payload, signature)
        assert not verify(SECRET, CONFIRMATION_FIELDS, _confirmation(), None)
        assert not verify(SECRET, CONFIRMATION_FIELDS, _confirmation(), "")

    def test_non_ascii_signature(self):
        assert not verify(SECRET, CONFIRMATION_FIELDS, _confirmation(), "é" * 64)
        assert not verify(SECRET, CONFIRMATION_FIELDS, _confirmation(), "²" * 64)

from auction_chat.realtime.identity import DEFAULT_USER_HEADER, Principal, bind_identity


class TestBindIdentity:
    def test_binds_from_header(self):
        principal = bind_identity({"USER_ID": "42"}, None)

        assert principal == Principal("42")
        assert str(principal) == "42"

    def test_existing_identity_is_kept(self):
        current = Principal("42")

        assert bind_identity({"USER_ID": "7"}, current) is current

    def test_idempotent(self):
        headers = {"USER_ID": "42"}

        once = bind_identity(headers, None)
        assert bind_identity(headers, once) == once

    def test_missing_or_blank_header(self):
        assert bind_identity({}, None) is None
        assert bind_identity({"USER_ID": "   "}, None) is None

    def test_header_name_is_exact(self):
        assert bind_identity({"user_id": "42"}, None) is None
        assert bind_identity({"X-User": "9"}, None, header_name="X-User") == Principal("9")

    def test_value_is_trimmed(self):
        assert bind_identity({DEFAULT_USER_HEADER: " 5 "}, None).name == "5"

from computeforge.triggers.signatures import (
    sign_github,
    sign_pagerduty,
    verify_github_signature,
    verify_pagerduty_signature,
)

BODY = b'{"ref":"refs/heads/main"}'


def test_github_signature_accepts_matching_digest():
    header = sign_github("s3cret", BODY)

    assert header.startswith("sha256=")
    assert verify_github_signature("s3cret", BODY, header)


def test_github_signature_rejects_other_secret_or_body():
    header = sign_github("s3cret", BODY)

    assert not verify_github_signature("other", BODY, header)
    assert not verify_github_signature("s3cret", BODY + b" ", header)
    assert not verify_github_signature("s3cret", BODY, None)


def test_verification_skipped_without_secret():
    assert verify_github_signature(None, BODY, None)
    assert verify_pagerduty_signature("", BODY, "garbage")


def test_pagerduty_accepts_any_listed_signature():
    header = f"v1=deadbeef, {sign_pagerduty('s3cret', BODY)}"

    assert verify_pagerduty_signature("s3cret", BODY, header)


def test_pagerduty_rejects_unknown_scheme_and_bad_digest():
    digest = sign_pagerduty("s3cret", BODY).removeprefix("v1=")

    assert not verify_pagerduty_signature("s3cret", BODY, f"v0={digest}")
    assert not verify_pagerduty_signature("s3cret", BODY, "v1=deadbeef")
    assert not verify_pagerduty_signature("s3cret", BODY, None)

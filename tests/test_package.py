import chatdeck
from chatdeck.sessions import SessionDirectory


def test_package_imports():
    assert chatdeck.__version__ == "0.1.0"
    for name in chatdeck.__all__:
        assert hasattr(chatdeck, name)


def test_directory_annotations_resolve():
    # Methods named like builtins must not break the other annotations.
    assert "list" in vars(SessionDirectory)
    assert SessionDirectory.recent.__annotations__["return"] == "list[SessionMetadata]"

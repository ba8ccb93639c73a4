"""Tests for the origin service: origin factories and migration planning."""

import pytest

from vcsorigin.config import apply_env_overrides, get_default_config
from vcsorigin.domain import Author, Authoring, AuthoringMode, Glob
from vcsorigin.errors import InvalidIntervalError, ValidationError
from vcsorigin.origins import FolderOrigin, GitOrigin, MemoryOrigin, MemoryRepository
from vcsorigin.services import (
    authoring_from_config,
    create_origin,
    last_migrated_revision,
    plan_migration,
)

BOT = Author("Bot", "bot@example.com")


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def repo():
    repo = MemoryRepository(name="svc")
    a = repo.commit("main", {"a.txt": "a"}, "A", "Jane <jane@example.com>")
    b = repo.commit("main", {"b.txt": "b"}, "B", "Jane <jane@example.com>")
    c = repo.commit("main", {"src/c.txt": "c"}, "C", "Jane <jane@example.com>")
    return repo, [a, b, c]


class TestCreateOrigin:

    def test_git_spec(self, config, tmp_path):
        config['general']['cache_dir'] = str(tmp_path)
        origin = create_origin("git:https://example.com/repo.git", config)
        assert isinstance(origin, GitOrigin)
        assert origin.url == "https://example.com/repo.git"
        assert origin.pool.cache_dir == tmp_path

    def test_git_timeout(self, config):
        config['general']['git_timeout_seconds'] = 30
        assert create_origin("git:/srv/repo", config).git.timeout == 30

    @pytest.mark.parametrize("value, expected", [(0, None), ("", None), ("1.5", 1.5), (2.5, 2.5), ("30", 30.0)])
    def test_git_timeout_conversion(self, config, value, expected):
        config['general']['git_timeout_seconds'] = value
        assert create_origin("git:/srv/repo", config).git.timeout == expected

    @pytest.mark.parametrize("value", ["soon", "-1", [5]])
    def test_git_timeout_invalid(self, config, value):
        config['general']['git_timeout_seconds'] = value
        with pytest.raises(ValidationError):
            create_origin("git:/srv/repo", config)

    def test_git_timeout_from_env(self, monkeypatch):
        monkeypatch.setenv("VCSORIGIN_GENERAL_GIT_TIMEOUT_SECONDS", "1.5")
        config = apply_env_overrides(get_default_config())
        assert create_origin("git:/srv/repo", config).git.timeout == 1.5

    def test_folder_spec(self, config, tmp_path):
        origin = create_origin(f"folder:{tmp_path}", config)
        assert isinstance(origin, FolderOrigin)
        assert origin.base_dir == tmp_path

    def test_folder_uses_config_defaults(self, config):
        config['folder']['author'] = "Importer <import@example.com>"
        origin = create_origin("folder:", config)
        assert origin.base_dir is None
        assert origin.author == "Importer <import@example.com>"

    def test_named_origin(self, config):
        config['origins'] = {'upstream': {'type': 'git', 'url': 'https://example.com/up.git', 'fetch': False}}
        origin = create_origin("upstream", config)
        assert origin.url == 'https://example.com/up.git'
        assert origin.fetch is False

    @pytest.mark.parametrize("spec", ["", "svn:https://example.com", "nope"])
    def test_unknown(self, config, spec):
        with pytest.raises(ValidationError):
            create_origin(spec, config)

    def test_named_origin_missing_url(self, config):
        config['origins'] = {'broken': {'type': 'git'}}
        with pytest.raises(ValidationError):
            create_origin("broken", config)


class TestAuthoringFromConfig:

    def test_defaults(self, config):
        policy = authoring_from_config(config)
        assert policy.mode is AuthoringMode.PASS_THRU
        assert policy.default_author == Author("vcsorigin", "noreply@vcsorigin.invalid")

    def test_allowed(self, config):
        config['authoring'].update({'mode': 'allowed', 'allowed': ['*@example.com'], 'strict': True})
        policy = authoring_from_config(config)
        assert policy.strict is True
        assert policy.is_allowed("Jane <jane@example.com>")
        assert not policy.is_allowed("Eve <eve@evil.test>")

    def test_invalid_mode(self, config):
        config['authoring']['mode'] = 'whatever'
        with pytest.raises(ValidationError):
            authoring_from_config(config)


class TestPlanMigration:

    def test_first_run_is_full_history(self, repo):
        repository, ids = repo
        origin = MemoryOrigin(repository)
        plan = plan_migration(origin, "main", Glob.all_files(), Authoring(default_author=BOT))
        assert [c.revision.as_string() for c in plan.changes] == ids
        assert plan.last_migrated is None
        assert plan.label_name == "MemoryOrigin-RevId"
        assert plan.reference.revision.as_string() == ids[-1]

    def test_incremental_run(self, repo):
        repository, ids = repo
        origin = MemoryOrigin(repository)
        messages = ["Unrelated", f"Import B\n\nMemoryOrigin-RevId: {ids[1]}"]
        last = last_migrated_revision(messages, origin.get_label_name())
        plan = plan_migration(origin, "main", Glob.all_files(), Authoring(default_author=BOT),
                              last_migrated=last)
        assert [c.revision.as_string() for c in plan.changes] == [ids[2]]
        assert plan.last_migrated.as_string() == ids[1]

    def test_up_to_date(self, repo):
        repository, ids = repo
        plan = plan_migration(MemoryOrigin(repository), "main", Glob.all_files(),
                              Authoring(default_author=BOT), last_migrated=ids[-1])
        assert plan.is_empty

    def test_reader_reused_for_checkout(self, repo, tmp_path):
        repository, ids = repo
        plan = plan_migration(MemoryOrigin(repository), "main", Glob(include=("src/**",)),
                              Authoring(default_author=BOT))
        plan.reader.checkout(plan.changes[-1].revision, tmp_path / "work")
        assert (tmp_path / "work" / "src" / "c.txt").read_text() == "c"
        assert not (tmp_path / "work" / "a.txt").exists()

    def test_diverged_destination(self, repo):
        repository, ids = repo
        repository.create_branch("other", ids[0])
        side = repository.commit("other", {"x.txt": "x"}, "X", "Jane <jane@example.com>")
        with pytest.raises(InvalidIntervalError):
            plan_migration(MemoryOrigin(repository), "main", Glob.all_files(),
                           Authoring(default_author=BOT), last_migrated=side)

    def test_folder_snapshot_plan(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "a.txt").write_text("a")
        plan = plan_migration(FolderOrigin(), str(tmp_path), Glob.all_files(),
                              Authoring(default_author=BOT))
        assert len(plan.changes) == 1
        assert plan.changes[0].changed_paths is None

    def test_to_dict(self, repo):
        repository, ids = repo
        plan = plan_migration(MemoryOrigin(repository), "main", Glob.all_files(),
                              Authoring(default_author=BOT), last_migrated=ids[0])
        data = plan.to_dict()
        assert data['last_migrated'] == ids[0]
        assert [c['revision'] for c in data['changes']] == ids[1:]
        assert data['reference']['labels'] == {'Memory-Repository': 'svc'}

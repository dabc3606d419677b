from minicrm.config import Settings


def test_defaults_cover_generation_and_storage():
    fields = Settings.model_fields

    assert fields["AI_PROVIDER"].default == "gemini"
    assert fields["GENERATION_LANGUAGE"].default == "Brazilian Portuguese"
    assert fields["MAX_GENERATED_MESSAGES"].default == 3
    assert fields["DATABASE_URL"].default.startswith("postgresql+asyncpg://")


def test_only_settings_the_service_reads_are_declared():
    assert "DEV_MODE" not in Settings.model_fields

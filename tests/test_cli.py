"""Tests for the command line interface."""

import argparse
import json

import pytest
import soundfile as sf
from PIL import Image

from resonant.cli import _parse_date, main
from resonant.fractals import create_fractal, get_name
from resonant.io.share import encode_snapshot
from resonant.user.seed import generate_daily_seed
from resonant.user.state import FrozenFractal


@pytest.fixture
def base_args(tmp_path):
    return ["--user", "alice", "--date", "2026-10-19", "--state", str(tmp_path / "state.json")]


class TestInfo:
    def test_prints_fractal(self, base_args, today, capsys):
        main(base_args + ["info"])
        out = capsys.readouterr().out
        info = json.loads(out.splitlines()[0])
        seed = generate_daily_seed("alice", today)
        assert info["seed"] == seed
        assert info["type"] == get_name(create_fractal(seed, 0.0))
        assert "Notes:" in out

    def test_bad_date(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["--date", "19/10/2026", "info"])

    def test_date_error_is_not_chained(self):
        with pytest.raises(argparse.ArgumentTypeError) as exc:
            _parse_date("2026-13-40")
        assert exc.value.__cause__ is None
        assert exc.value.__suppress_context__


class TestOutputs:
    def test_slice(self, base_args, tmp_path):
        out = tmp_path / "slice.png"
        main(base_args + ["slice", str(out), "--width", "24", "--height", "16"])
        with Image.open(out) as img:
            assert img.size == (24, 16)

    def test_sonify(self, base_args, tmp_path, capsys):
        out = tmp_path / "tone.wav"
        main(base_args + ["sonify", str(out), "--duration", "0.25", "--harmonics"])
        data, sr = sf.read(out)
        assert sr == 22050
        assert len(data) == int(0.25 * 22050)
        assert "Frequencies:" in capsys.readouterr().out


class TestUserCommands:
    def test_gesture_persists(self, base_args, capsys):
        main(base_args + ["gesture", "pinch", "--intensity", "0.5"])
        main(base_args + ["gesture", "smile"])
        out = capsys.readouterr().out
        assert "interactions 2" in out

    def test_freeze(self, base_args, today, capsys):
        main(base_args + ["freeze"])
        frozen = FrozenFractal.from_json(capsys.readouterr().out)
        assert frozen.seed == generate_daily_seed("alice", today)

    def test_share(self, base_args, capsys):
        main(base_args + ["share"])
        out = capsys.readouterr().out.splitlines()
        url = out[-1]
        assert url.startswith("https://resonant.app?f=")
        assert "from=alice" in url
        assert out[0].startswith("Broadcasting morning fractal")

    def test_share_queues_morning_message(self, base_args, tmp_path):
        main(base_args + ["share"])
        main(base_args + ["share"])
        state = json.loads((tmp_path / "state.json").read_text())
        messages = state["pending_messages"]
        assert len(messages) == 2
        assert all(m["message_type"] == "morning" for m in messages)
        assert all(m["sender_id"] == "alice" for m in messages)

    def test_token_and_redeem(self, base_args, today, capsys):
        main(base_args + ["token", "--hours", "1"])
        token = capsys.readouterr().out.strip()
        main(base_args + ["redeem", token])
        out = capsys.readouterr().out
        assert f"Token grants seed {generate_daily_seed('alice', today)}" in out

    def test_redeem_expired_token(self, base_args, capsys):
        main(base_args + ["token", "--hours=-1"])
        token = capsys.readouterr().out.strip()
        with pytest.raises(SystemExit) as exc:
            main(base_args + ["redeem", token])
        assert exc.value.code == 1
        assert "expired" in capsys.readouterr().err

    def test_battle_token(self, base_args, capsys):
        opponent = FrozenFractal(
            seed=1, fractal_type="Julia4D", transform_matrix=(1.0,) * 16,
            complexity_score=99.0, timestamp=0, interaction_count=0,
        )
        main(base_args + ["battle", encode_snapshot(opponent)])
        result = json.loads(capsys.readouterr().out)
        assert result["winner"]["seed"] == 1

    def test_battle_invalid_token(self, base_args, capsys):
        with pytest.raises(SystemExit) as exc:
            main(base_args + ["battle", "garbage"])
        assert exc.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_config(self, base_args, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(base_args + ["--config", str(tmp_path / "absent.json"), "info"])
        assert exc.value.code == 1

from resonant.user.seed import date_string, day_code, generate_daily_seed
from resonant.user.state import (
    BattleResult,
    FrozenFractal,
    JsonStateStore,
    UserState,
    battle,
    calculate_resonance,
    complexity_score,
    gesture_transform,
)

def skill_percentage(total_losses: int, active_losses: int) -> int:
    """
    Share of the computer's losing boards that have been pruned away.

    skill = (total - active) / total * 100, truncated to an int.
    A store with no losing boards has nothing to learn and scores 0.
    """
    if total_losses <= 0:
        return 0
    if not 0 <= active_losses <= total_losses:
        raise ValueError(f"Active losses {active_losses} outside 0..{total_losses}")
    return int((total_losses - active_losses) / total_losses * 100.0)

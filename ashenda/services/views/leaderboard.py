RANK_ICONS = ("\U0001f947", "\U0001f948", "\U0001f949", "\U0001f3c5", "\U0001f3c5")


def rank_icon(index):
    if index < len(RANK_ICONS):
        return RANK_ICONS[index]
    return RANK_ICONS[-1]


def top_nominees(nominees, limit=5):
    # sorted() is stable, so equal counts keep the store's id order.
    ranked = sorted(nominees, key=lambda nominee: -(nominee.get("votes") or 0))

    return [
        {"rank": index + 1, "icon": rank_icon(index), "nominee": nominee}
        for index, nominee in enumerate(ranked[:limit])
    ]

def normalize_query(query):
    return (query or "").strip().lower()


def search_nominees(nominees, query, fields=("name", "city")):
    needle = normalize_query(query)
    if not needle:
        return list(nominees)

    return [
        nominee
        for nominee in nominees
        if any(needle in (nominee.get(field) or "").lower() for field in fields)
    ]

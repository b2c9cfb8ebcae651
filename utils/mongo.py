def parse_mongo_data(data):
    """Make raw Mongo documents JSON-safe (ObjectId -> str), recursively."""
    if isinstance(data, list):
        return [parse_mongo_data(item) for item in data]
    if isinstance(data, dict):
        if "_id" in data:
            data["_id"] = str(data["_id"])
        return {k: parse_mongo_data(v) for k, v in data.items()}
    return data

from .serializable import Serializable


class Cache(Serializable):
    def __init__(self, id, name, lat, long, tags=None):
        self.id = id
        self.name = name
        self.lat = lat
        self.long = long
        self.tags = set(tags) if tags is not None else set()


    @property
    def __dict__(self):
        return dict(
                id=self.id,
                name=self.name,
                lat=self.lat,
                long=self.long,
                tags=sorted(self.tags),
                )


    def copy(self):
        return Cache(self.id, self.name, self.lat, self.long, self.tags)


    def __eq__(self, other):
        if not isinstance(other, Cache):
            return NotImplemented
        return (self.id, self.name, self.lat, self.long, self.tags) == \
                (other.id, other.name, other.lat, other.long, other.tags)


    def __repr__(self):
        return F'Cache(id={self.id}, name={self.name!r}, lat={self.lat}, long={self.long}, tags={sorted(self.tags)})'

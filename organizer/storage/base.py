from abc import ABC, abstractmethod

class Storage(ABC):
    @abstractmethod
    def save(self, path: str, data: bytes):
        pass

    @abstractmethod
    def delete(self, path: str):
        pass

    @abstractmethod
    def delete_tree(self, path: str):
        pass

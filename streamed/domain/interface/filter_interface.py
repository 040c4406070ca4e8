from abc import ABC, abstractmethod

from streamed.domain.stream_descriptor import StreamDescriptor


class FilterInterface(ABC):
    @abstractmethod
    def matches(self, item: StreamDescriptor) -> bool:
        pass

    def reset(self):
        pass

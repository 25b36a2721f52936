"""Abstract interfaces for collaborators outside the SDK.

These ABCs define the contract that external implementations must fulfil.
The SDK ships no concrete implementations; deployments plug in a client
for their asset host.

Typical integration::

    store: MediaStore = MyAssetHostStore(...)
    # uploads happen in the editor, which stores the returned URL as a
    # question's mediaUrl

    service = FormService(media_store=store)
    # saving or deleting a form now removes media the form stopped using
"""

from abc import ABC, abstractmethod


class MediaStore(ABC):
    """Interface for the third-party media host.

    The editor uploads images and videos to the host directly; the SDK
    only asks it to delete media no form references anymore.
    """

    @abstractmethod
    async def delete(self, public_id: str, resource_type: str) -> None:
        """Delete a stored asset.

        Parameters
        ----------
        public_id:
            The host's identifier, as returned by
            :func:`canova_flow.media.extract_public_id`.
        resource_type:
            ``"image"`` or ``"video"``.
        """
        ...

"""
Endpointy kluczy API dostawców.
Odczyt zwraca tylko zamaskowane wartości.
"""

from fastapi import APIRouter, Depends, status

from shortstudio.api.deps import get_credential_store, get_current_user
from shortstudio.core.exceptions import NotFound
from shortstudio.models.user import User
from shortstudio.schemas.api_keys import ApiKeysResponse, ApiKeysUpdateRequest
from shortstudio.services.credentials.store import CredentialStore, mask_secret

router = APIRouter()


async def _masked(store: CredentialStore, user: User) -> ApiKeysResponse:
    keys = await store.fetch_api_keys(user.id)
    return ApiKeysResponse(keys={name: mask_secret(value) for name, value in keys.items() if value})


@router.put("", response_model=ApiKeysResponse)
async def save_api_keys(
    body: ApiKeysUpdateRequest,
    current_user: User = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    """Nadpisuje cały zestaw kluczy użytkownika."""
    await store.save_api_keys(current_user.id, body.keys)
    return await _masked(store, current_user)


@router.get("", response_model=ApiKeysResponse)
async def get_api_keys(
    current_user: User = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    return await _masked(store, current_user)


@router.delete("/{provider}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_api_key(
    provider: str,
    current_user: User = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    if not await store.remove(current_user.id, provider):
        raise NotFound(f"Brak klucza dla dostawcy '{provider}'")

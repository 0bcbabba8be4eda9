"""
Session Manager

Owns the API key lifecycle: acquire, persist, refresh, expire, invalidate.

The key is persisted in a KeyValueStore so a restarted process picks up the
previous login. A single expiry timer refreshes the key GRACE before the
server would invalidate it; if the refresh fails the session ends and
on_need_relogin fires.

Listeners subscribe to on_login, on_logout and on_need_relogin.
"""

import asyncio
import logging
import math
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Callable

from iotapps.auth.ports import CredentialTransport
from iotapps.auth.session import (
    Session,
    TimerState,
    STORAGE_API_KEY,
    STORAGE_API_KEY_EXPIRE,
    STORAGE_API_KEY_EXPIRE_PERIOD,
    STORAGE_LAST_USERNAME,
)
from iotapps.errors import AuthError, ExpiryError, TransportError, ValidationError
from iotapps.events import (
    AuthEvent,
    Signal,
    create_login_event,
    create_logout_event,
    create_need_relogin_event,
)
from iotapps.models import (
    ApiResponseBase,
    KeyType,
    LoginApiResponse,
    PasscodeType,
    SendPasscodeApiResponse,
)
from iotapps.storage import KeyValueStore

logger = logging.getLogger(__name__)

# How long before the key expires it gets refreshed
DEFAULT_REFRESH_GRACE = timedelta(minutes=2)

# Upper bound for a single timer delay; longer waits refresh early
MAX_TIMER_DELAY = timedelta(milliseconds=0x7FFFFFFE)

KeyExpire = str | int | float | datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _mask(key: str | None) -> str:
    if not key:
        return "<none>"
    return f"{key[:6]}..."


def parse_key_expire(value: KeyExpire) -> datetime:
    """
    Parse a key expiry into an aware UTC datetime.

    Accepts ISO-8601 or RFC 2822 strings, milliseconds since the epoch,
    or datetimes (naive ones are taken as UTC).

    Raises:
        ExpiryError: If the value cannot be interpreted
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        raise ExpiryError(f"Invalid key expiry: {value!r}")
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ExpiryError(f"Invalid key expiry: {value!r}")
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise ExpiryError(f"Invalid key expiry: {value!r}") from e
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = parsedate_to_datetime(text)
            except (TypeError, ValueError) as e:
                raise ExpiryError(f"Invalid key expiry: {value!r}") from e
    else:
        raise ExpiryError(f"Invalid key expiry: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class SessionManager:
    """
    Manages the API key of one logged in user.

    Not safe for use from several threads; all calls must come from the
    event loop that ran start().

    Concurrent login* calls are not serialized: each call finishes its own
    logout before exchanging credentials, and the last one to complete wins.
    """

    def __init__(
        self,
        transport: CredentialTransport,
        storage: KeyValueStore,
        refresh_grace: timedelta = DEFAULT_REFRESH_GRACE,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the session manager.

        Args:
            transport: Network calls for login, refresh and logout
            storage: Persistent store for the key and its expiry
            refresh_grace: How long before expiry the key is refreshed
            clock: Returns the current aware UTC time
        """
        self._transport = transport
        self._storage = storage
        self._refresh_grace = refresh_grace
        self._clock = clock

        self._session = Session()

        # Expiry timer and the refresh it spawned when it fired
        self._expiry_handle: asyncio.TimerHandle | None = None
        self._refresh_task: asyncio.Task | None = None
        self._timer_state = TimerState.UNARMED

        # Session teardown scheduled from sync callbacks (401 handling)
        self._pending_tasks: set[asyncio.Task] = set()

        # Shared future for ensure_authenticated() callers
        self._auth_waiter: asyncio.Future[bool] | None = None

        # Key is no longer usable: server returned 401, refresh failed or key expired
        self.on_need_relogin = Signal("need_relogin")
        # User got an API key
        self.on_login = Signal("login")
        # API key was forgotten
        self.on_logout = Signal("logout")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Restore the session persisted by a previous run."""
        self._session.last_username = await self._storage.get(STORAGE_LAST_USERNAME)

        api_key = await self._storage.get(STORAGE_API_KEY)
        if not api_key:
            logger.debug("API key was not found in storage")
            return

        logger.debug(f"API key extracted from storage: {_mask(api_key)}")
        self._session.token = api_key
        period = await self._storage.get(STORAGE_API_KEY_EXPIRE_PERIOD)
        if period is not None:
            try:
                self._session.expire_period_ms = int(period)
            except ValueError:
                logger.warning(f"Ignoring invalid stored key expire period: {period!r}")

        key_expire = await self._storage.get(STORAGE_API_KEY_EXPIRE)
        if key_expire:
            await self._arm_expiry_timer(key_expire)

        if self._session.is_authenticated:
            self.on_login.emit(create_login_event(self._session.last_username))

    async def stop(self) -> None:
        """Cancel the expiry timer and any refresh it started."""
        self._cancel_expiry_timer()
        for task in list(self._pending_tasks):
            task.cancel()
        if self._refresh_task:
            self._refresh_task.cancel()
            try:
                await self._refresh_task
            except asyncio.CancelledError:
                pass
            self._refresh_task = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def api_key(self) -> str | None:
        return self._session.token

    @property
    def api_key_expire(self) -> datetime | None:
        return self._session.expires_at

    @property
    def api_key_expire_period(self) -> int | None:
        """Validity period of the current key in milliseconds."""
        return self._session.expire_period_ms

    @property
    def last_username(self) -> str | None:
        return self._session.last_username

    @property
    def timer_state(self) -> TimerState:
        return self._timer_state

    @property
    def refresh_due_in(self) -> float | None:
        """Seconds until the expiry timer fires, None if it is not armed."""
        if self._expiry_handle is None:
            return None
        loop = asyncio.get_running_loop()
        return max(0.0, self._expiry_handle.when() - loop.time())

    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    # =========================================================================
    # Authentication
    # =========================================================================

    async def ensure_authenticated(self) -> bool:
        """
        Wait until a key is available.

        Returns immediately when logged in. Otherwise all callers share one
        future that resolves on the next on_login.
        """
        if self._session.is_authenticated:
            return True

        if self._auth_waiter is None:
            waiter: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

            def resolve(event: AuthEvent) -> None:
                unsubscribe()
                if self._auth_waiter is waiter:
                    self._auth_waiter = None
                if not waiter.done():
                    waiter.set_result(True)

            unsubscribe = self.on_login.connect(resolve)
            self._auth_waiter = waiter

        # shield: a cancelled caller must not cancel the future for the others
        return await asyncio.shield(self._auth_waiter)

    async def login(
        self,
        username: str,
        password: str,
        admin: bool = False,
    ) -> LoginApiResponse:
        """
        Log in by username and password.

        Args:
            username: Account username
            password: Account password
            admin: Request an admin key

        Raises:
            AuthError: If the transport call fails
        """
        await self.logout_local()
        result = await self._transport.login_by_password(
            username,
            password,
            key_type=KeyType.ADMIN if admin else None,
        )
        logger.info(f"Logged in as: {username}")
        await self._apply_login(result.key, result.expires, username=username)
        return result

    async def login_by_passcode(
        self,
        username: str,
        passcode: str,
        admin: bool = False,
    ) -> LoginApiResponse:
        """
        Log in by username and one-time passcode.

        Raises:
            AuthError: If the transport call fails
        """
        await self.logout_local()
        result = await self._transport.login_by_passcode(
            username,
            passcode,
            key_type=KeyType.ADMIN if admin else KeyType.USER,
        )
        logger.info(f"Logged in by passcode as: {username}")
        await self._apply_login(result.key, result.expires, username=username)
        return result

    async def login_by_key(
        self,
        api_key: str,
        admin: bool = False,
    ) -> LoginApiResponse | TransportError:
        """
        Log in with an existing key instead of username and password.

        The key may be temporary. If the server does not issue a new key the
        supplied one stays active.

        Unlike the other login methods a transport failure is returned, not
        raised.
        """
        try:
            await self.logout_local()
            result = await self._transport.login_by_key(
                api_key=api_key,
                key_type=KeyType.ADMIN if admin else KeyType.USER,
            )
        except TransportError as e:
            logger.warning(f"Login by API key failed: {e}")
            return e

        logger.info("Logged in by API key")
        await self._apply_login(result.key or api_key, result.expires, username=None)
        return result

    async def refresh_token(self) -> LoginApiResponse:
        """
        Exchange the current key for a new one with a reset expiry.

        Raises:
            ValidationError: If there is no key to refresh
            AuthError: If the transport call fails
        """
        current = self._session.token
        if not current:
            raise ValidationError("No API key to refresh")

        result = await self._transport.login_by_key(api_key=current)
        if self._session.token != current:
            # Logged out or logged in again while the request was in flight
            logger.debug(f"Discarding refresh of replaced API key {_mask(current)}")
            return result

        new_key = result.key or current
        logger.debug(f"API key has refreshed from: {_mask(current)} to {_mask(new_key)}")

        self._session.token = new_key
        await self._storage.set(STORAGE_API_KEY, new_key)
        await self._store_expire_period(result.expires)
        await self._arm_expiry_timer(result.expires)
        return result

    async def get_temp_token(self) -> LoginApiResponse:
        """Request a temporary key valid for a brief amount of time."""
        result = await self._transport.login_by_key(key_type=KeyType.TEMPORARY)
        logger.debug("Temporary API key has been requested")
        return result

    async def send_passcode(
        self,
        username: str,
        admin: bool = False,
        brand: str | None = None,
    ) -> SendPasscodeApiResponse:
        """
        Send an SMS verification code to a user.

        Raises:
            ValidationError: If username is empty (no request is sent)
        """
        if not username:
            raise ValidationError(f"Username can not be empty [{username}].")
        return await self._transport.send_passcode(
            username,
            passcode_type=PasscodeType.SMS,
            key_type=KeyType.ADMIN if admin else KeyType.USER,
            brand=brand or None,
        )

    async def set_new_password(
        self,
        new_password: str,
        old_password: str,
        passcode: str | None = None,
        brand: str | None = None,
        app_name: str | None = None,
    ) -> ApiResponseBase:
        """
        Change the password of the logged in user.

        Waits for a login first. With 2-factor auth the first call sends a
        passcode; call again with it.
        """
        await self.ensure_authenticated()
        return await self._transport.set_new_password(
            new_password,
            old_password,
            passcode=passcode,
            brand=brand,
            app_name=app_name,
        )

    async def set_new_password_by_temp_key(
        self,
        new_password: str,
        temp_key: str,
        brand: str | None = None,
        app_name: str | None = None,
        passcode: str | None = None,
    ) -> ApiResponseBase:
        """Set a new password using a temporary key."""
        return await self._transport.set_new_password_by_temp_key(
            new_password,
            temp_key,
            brand=brand,
            app_name=app_name,
            passcode=passcode,
        )

    def get_authorization_url(
        self,
        approved: bool,
        client_id: str,
        response_type: str,
        api_key: str,
        state: str | None = None,
        location_id: int | None = None,
        brand: str | None = None,
    ) -> str:
        """URL that approves or denies a third-party OAuth authorization request."""
        return self._transport.get_authorization_url(
            approved,
            client_id=client_id,
            response_type=response_type,
            api_key=api_key,
            state=state,
            location_id=location_id,
            brand=brand,
        )

    # =========================================================================
    # Logout
    # =========================================================================

    async def logout_local(self) -> bool:
        """Forget the key on this client only. Always succeeds."""
        self._session.token = None
        await self._storage.remove(STORAGE_API_KEY)
        await self._clear_expiry()
        self.on_logout.emit(create_logout_event())
        logger.debug("System logged out")
        return True

    async def logout_global(self) -> None:
        """
        Revoke the key on the server for every client, then forget it locally.

        Raises:
            AuthError: If the server call fails; local state is unchanged
        """
        await self._transport.logout()
        logger.info("System logged out from all the clients")
        self._session.token = None
        await self._storage.remove(STORAGE_API_KEY)
        await self._clear_expiry()
        self.on_logout.emit(create_logout_event())

    def handle_unauthorized(self, event: AuthEvent) -> None:
        """
        React to a 401 from the server.

        Connected to ApiClient.on_unauthorized by the composition root.
        """
        if not self._session.is_authenticated:
            return
        logger.warning(f"API key rejected by the server ({event.reason})")
        task = asyncio.get_running_loop().create_task(
            self._end_session("unauthorized", self._session.token)
        )
        self._pending_tasks.add(task)
        task.add_done_callback(self._pending_tasks.discard)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _apply_login(
        self,
        key: str | None,
        key_expire: KeyExpire | None,
        username: str | None,
    ) -> None:
        """Store a freshly issued key and notify listeners."""
        if not key:
            raise AuthError("Login response did not contain an API key")

        self._session.token = key
        await self._storage.set(STORAGE_API_KEY, key)

        if username is None:
            self._session.last_username = None
            await self._storage.remove(STORAGE_LAST_USERNAME)
        else:
            self._session.last_username = username
            await self._storage.set(STORAGE_LAST_USERNAME, username)

        await self._store_expire_period(key_expire)
        await self._arm_expiry_timer(key_expire)

        # An already expired key ends the session inside _arm_expiry_timer
        if self._session.is_authenticated:
            self.on_login.emit(create_login_event(username))

    async def _store_expire_period(self, key_expire: KeyExpire | None) -> None:
        if key_expire is None or key_expire == "":
            return
        try:
            expires_at = parse_key_expire(key_expire)
        except ExpiryError:
            return
        period_ms = int((expires_at - self._clock()).total_seconds() * 1000)
        self._session.expire_period_ms = period_ms
        await self._storage.set(STORAGE_API_KEY_EXPIRE_PERIOD, str(period_ms))

    def _refresh_schedule(self, key_expire: KeyExpire) -> tuple[datetime, float]:
        """
        Compute when to refresh.

        Returns:
            (expiry instant, timer delay in seconds)

        Raises:
            ExpiryError: If the key is expired, or expires within the grace period
        """
        expires_at = parse_key_expire(key_expire)
        delay = (expires_at - self._clock() - self._refresh_grace).total_seconds()
        if not math.isfinite(delay) or delay <= 0:
            raise ExpiryError(f"API key has expired: {expires_at.isoformat()}")
        return expires_at, min(delay, MAX_TIMER_DELAY.total_seconds())

    async def _arm_expiry_timer(self, key_expire: KeyExpire | None) -> None:
        if key_expire is None or key_expire == "":
            await self._clear_expiry()
            return

        try:
            expires_at, delay = self._refresh_schedule(key_expire)
        except ExpiryError as e:
            logger.debug(f"{e} ({_mask(self._session.token)})")
            await self._end_session("expired", self._session.token)
            return

        self._cancel_expiry_timer()
        self._session.expires_at = expires_at
        await self._storage.set(STORAGE_API_KEY_EXPIRE, expires_at.isoformat())

        loop = asyncio.get_running_loop()
        self._expiry_handle = loop.call_later(delay, self._on_expiry_timer)
        self._timer_state = TimerState.ARMED
        logger.debug(f"API key refresh scheduled in {delay:.0f}s")

    def _on_expiry_timer(self) -> None:
        self._expiry_handle = None
        self._timer_state = TimerState.FIRED
        logger.debug(f"API key ({_mask(self._session.token)}) is about to expire. Refreshing...")
        self._refresh_task = asyncio.get_running_loop().create_task(
            self._refresh_or_end_session()
        )

    async def _refresh_or_end_session(self) -> None:
        token = self._session.token
        try:
            await self.refresh_token()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Scheduled API key refresh failed: {e}")
            await self._end_session("refresh_failed", token)
        finally:
            if self._refresh_task is asyncio.current_task():
                self._refresh_task = None

    async def _end_session(self, reason: str, token: str | None) -> None:
        """End the session of `token`. No-op once that key was logged out or replaced."""
        if not token or self._session.token != token:
            logger.debug(f"Session of {_mask(token)} already ended, ignoring '{reason}'")
            return
        await self.logout_local()
        self.on_need_relogin.emit(create_need_relogin_event(reason))

    def _cancel_expiry_timer(self) -> None:
        if self._expiry_handle:
            self._expiry_handle.cancel()
            self._expiry_handle = None
        self._timer_state = TimerState.UNARMED

    async def _clear_expiry(self) -> None:
        self._cancel_expiry_timer()
        self._session.clear_expiry()
        await self._storage.remove(STORAGE_API_KEY_EXPIRE)
        await self._storage.remove(STORAGE_API_KEY_EXPIRE_PERIOD)

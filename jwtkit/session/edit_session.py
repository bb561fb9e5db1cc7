"""Interactive JWT edit session.

The session owns one ``SessionState`` and advances it through named
transitions, one per event type:

* ``TokenReplaced``   -- decode, derive expiry/algorithm, verify
* ``EditingToggled``  -- enter or leave edit mode
* ``ClaimsEdited``    -- re-sign the edited header/payload buffers
* ``KeysEdited``      -- re-verify and, if the key signature changed, re-sign
* ``AlgorithmSwitched`` -- re-sign the current payload under a new ``alg``

Input fields (token text, buffers, keys) are stored as soon as the caller
provides them. The work each input triggers runs debounced on its own
channel, under a single lock, and an async result is applied only while the
generation it was issued under is still current.

When a claims edit and a key edit overlap, the claims edit wins: in edit mode
key changes never re-sign on the key channel and instead re-run the claims
transition with the new keys.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from jwtkit.core.logging import get_logger
from jwtkit.core.settings import DebounceSettings, ToolkitSettings
from jwtkit.crypto import codec
from jwtkit.crypto.keys import is_supported, key_signature, required_slot
from jwtkit.crypto.signer import TokenSigner
from jwtkit.crypto.types import (
    DecodedToken,
    DecodeError,
    KeyMaterial,
    UnsupportedAlgorithmError,
)
from jwtkit.crypto.verifier import SignatureVerifier
from jwtkit.session.claims import (
    ClaimRow,
    add_common_claims,
    current_unix_time,
    describe_claims,
    format_json,
    is_expired,
    parse_claims,
)
from jwtkit.session.debounce import Channel, ChannelDebouncer
from jwtkit.session.errors import ClaimsJsonInvalidError
from jwtkit.session.presets import get_preset
from jwtkit.session.types import (
    PROVIDE_KEY_NOTICE,
    TOKEN_REQUIRED_MESSAGE,
    AlgorithmSwitched,
    ClaimsEdited,
    EditingToggled,
    KeysEdited,
    SessionEvent,
    SessionState,
    TokenExport,
    TokenOrigin,
    TokenReplaced,
    ValidationState,
)

logger = get_logger(__name__)

Handler = Callable[[Any, int], Awaitable[object]]

DEFAULT_TYP = "JWT"


class EditSession:
    """Single-writer state machine behind the JWT tool."""

    def __init__(
        self,
        settings: ToolkitSettings | None = None,
        debounce: DebounceSettings | None = None,
        *,
        verifier: SignatureVerifier | None = None,
        signer: TokenSigner | None = None,
        clock: Callable[[], int] = current_unix_time,
    ) -> None:
        self._settings = settings or ToolkitSettings()
        debounce = debounce or DebounceSettings()
        self._verifier = verifier or SignatureVerifier()
        self._signer = signer or TokenSigner()
        self._clock = clock
        self._debouncer = ChannelDebouncer(
            {
                Channel.TOKEN: debounce.token_seconds,
                Channel.CLAIMS: debounce.claims_seconds,
                Channel.KEYS: debounce.keys_seconds,
                Channel.ALGORITHM: debounce.algorithm_seconds,
            }
        )
        self._lock = asyncio.Lock()
        self._state = SessionState()
        self._transitions: dict[type, tuple[Channel | None, Handler]] = {
            TokenReplaced: (Channel.TOKEN, self._on_token_replaced),
            EditingToggled: (None, self._on_editing_toggled),
            ClaimsEdited: (Channel.CLAIMS, self._on_claims_edited),
            KeysEdited: (Channel.KEYS, self._on_keys_edited),
            AlgorithmSwitched: (Channel.ALGORITHM, self._on_algorithm_switched),
        }

    @property
    def state(self) -> SessionState:
        return self._state

    # -- lifecycle -----------------------------------------------------------

    async def start(self) -> SessionState:
        """Sign the default token so the tool opens with something to show."""
        algorithm = self._settings.default_algorithm
        if not is_supported(algorithm):
            raise UnsupportedAlgorithmError(algorithm)
        if required_slot(algorithm) == "secret":
            keys = KeyMaterial(secret=self._settings.default_secret)
        else:
            keys = get_preset(algorithm).keys
        header = {"alg": algorithm, "typ": DEFAULT_TYP}
        payload = self._default_payload()

        async with self._lock:
            token = await self._signer.sign(header, payload, keys)
            self._state = SessionState(keys=keys)
            if token is None:
                logger.warning("initial_token_unsigned", algorithm=algorithm)
                return self._state
            await self._replace_token(
                token,
                TokenOrigin.ALGORITHM,
                last_applied_key_signature=key_signature(algorithm, keys),
            )
        return self._state

    async def settle(self) -> SessionState:
        """Wait for every scheduled channel run to finish."""
        await self._debouncer.drain()
        return self._state

    async def aclose(self) -> None:
        await self._debouncer.aclose()

    # -- user input ------------------------------------------------------------

    def set_token(self, token: str) -> None:
        """Token text typed or pasted by the user."""
        self._submit(TokenReplaced(token=token))

    def edit_claims(
        self, *, header_text: str | None = None, payload_text: str | None = None
    ) -> None:
        """Header/payload buffer edits; ignored outside edit mode."""
        self._submit(ClaimsEdited(header_text=header_text, payload_text=payload_text))

    def set_keys(
        self,
        *,
        secret: str | None = None,
        public_key: str | None = None,
        private_key: str | None = None,
    ) -> None:
        """Key field edits; fields left as None keep their value."""
        self._submit(
            KeysEdited(secret=secret, public_key=public_key, private_key=private_key)
        )

    async def enter_editing(self) -> SessionState:
        await self.dispatch(EditingToggled(editing=True))
        return self._state

    async def exit_editing(self) -> SessionState:
        await self.dispatch(EditingToggled(editing=False))
        return self._state

    async def switch_algorithm(self, algorithm: str) -> SessionState:
        """Re-sign the current payload under ``algorithm`` with the current keys."""
        if not is_supported(algorithm):
            raise UnsupportedAlgorithmError(algorithm)
        await self.dispatch(AlgorithmSwitched(algorithm=algorithm))
        return self._state

    async def load_preset(self, name: str) -> SessionState:
        """Switch to a preset's algorithm and key material."""
        preset = get_preset(name)
        await self.dispatch(
            AlgorithmSwitched(
                algorithm=preset.algorithm, keys=preset.keys, label=preset.label
            )
        )
        return self._state

    def add_common_claims(self) -> None:
        """Fill absent standard claims in the payload buffer and re-sign.

        Raises ``ClaimsJsonInvalidError`` when the payload buffer is not a
        JSON object.
        """
        payload = parse_claims(self._state.payload_text, "payload")
        updated = add_common_claims(payload, now=self._clock())
        self._accept(EditingToggled(editing=True))
        self.edit_claims(payload_text=format_json(updated))

    # -- derived views ---------------------------------------------------------

    def claims_table(self) -> list[ClaimRow]:
        decoded = self._state.validation.decoded
        if decoded is None:
            return []
        return describe_claims(decoded.payload, now=self._clock())

    def export_token(self) -> TokenExport | None:
        if not self._state.token:
            return None
        return TokenExport(
            filename=self._settings.export_filename, content=self._state.token
        )

    # -- dispatch --------------------------------------------------------------

    async def dispatch(self, event: SessionEvent) -> None:
        """Run the transition for ``event`` now, bypassing the debounce delay."""
        channel, handler = self._transitions[type(event)]
        if not self._accept(event):
            return
        generation = self._debouncer.bump(channel) if channel is not None else 0
        await self._run(channel, handler, event, generation)

    def _submit(self, event: SessionEvent) -> None:
        channel, handler = self._transitions[type(event)]
        if not self._accept(event):
            return
        if channel is None:
            raise ValueError(f"{type(event).__name__} cannot be debounced")
        self._debouncer.submit(
            channel,
            lambda generation: self._run(channel, handler, event, generation),
        )

    async def _run(
        self, channel: Channel | None, handler: Handler, event: Any, generation: int
    ) -> None:
        async with self._lock:
            if channel is not None and not self._debouncer.is_current(
                channel, generation
            ):
                return
            await handler(event, generation)

    def _accept(self, event: SessionEvent) -> bool:
        """Store the event's input fields and invalidate superseded runs.

        Returns False when the event has nothing to do.
        """
        state = self._state
        if isinstance(event, TokenReplaced):
            self._state = state.model_copy(
                update={"token": event.token, "editing": False, "notice": None}
            )
            self._supersede(Channel.CLAIMS, Channel.KEYS, Channel.ALGORITHM)
        elif isinstance(event, ClaimsEdited):
            if not state.editing:
                logger.debug("claims_edit_ignored", reason="not_editing")
                return False
            update: dict[str, str] = {}
            if event.header_text is not None:
                update["header_text"] = event.header_text
            if event.payload_text is not None:
                update["payload_text"] = event.payload_text
            self._state = state.model_copy(update=update)
            self._supersede(Channel.ALGORITHM)
        elif isinstance(event, KeysEdited):
            changes = {
                name: value
                for name, value in event.model_dump().items()
                if value is not None
            }
            self._state = state.model_copy(
                update={"keys": state.keys.model_copy(update=changes)}
            )
            self._supersede(Channel.ALGORITHM)
        elif isinstance(event, EditingToggled):
            if event.editing == state.editing:
                return False
            self._state = state.model_copy(update={"editing": event.editing})
            if not event.editing:
                self._supersede(Channel.CLAIMS)
        elif isinstance(event, AlgorithmSwitched):
            self._supersede(Channel.CLAIMS, Channel.KEYS)
        return True

    def _supersede(self, *channels: Channel) -> None:
        for channel in channels:
            self._debouncer.bump(channel)

    # -- transitions -----------------------------------------------------------

    async def _on_token_replaced(self, event: TokenReplaced, generation: int) -> None:
        logger.info("token_replaced", origin=str(event.origin))
        await self._process_token(generation)

    async def _on_editing_toggled(self, event: EditingToggled, _generation: int) -> None:
        logger.info("editing_toggled", editing=event.editing)
        if not event.editing:
            await self._process_token(self._debouncer.bump(Channel.TOKEN))

    async def _on_claims_edited(self, _event: ClaimsEdited, generation: int) -> bool:
        """Sign the text buffers; False when they could not be used."""
        state = self._state
        if not state.editing:
            return False
        try:
            header = parse_claims(state.header_text, "header")
            payload = parse_claims(state.payload_text, "payload")
        except ClaimsJsonInvalidError as exc:
            logger.debug("claims_not_applied", reason=str(exc))
            return False

        keys = state.keys
        outcome = await self._signer.sign_detailed(header, payload, keys)
        if not self._is_fresh(Channel.CLAIMS, generation):
            return True

        if outcome.token is not None:
            await self._replace_token(
                outcome.token,
                TokenOrigin.CLAIMS,
                last_applied_key_signature=key_signature(header["alg"], keys),
                notice=None,
            )
            return True

        previous = self._state.validation
        decoded = DecodedToken(
            header=header,
            payload=payload,
            signature=previous.decoded.signature if previous.decoded else "",
        )
        notice = PROVIDE_KEY_NOTICE if outcome.missing_key else outcome.error
        self._state = self._state.model_copy(
            update={
                "validation": ValidationState(
                    is_valid_format=True,
                    decoded=decoded,
                    algorithm=decoded.algorithm,
                    expired=is_expired(payload, self._clock()),
                ),
                "notice": notice,
            }
        )
        return True

    async def _on_keys_edited(self, _event: KeysEdited, generation: int) -> None:
        state = self._state
        if state.editing:
            applied = await self._on_claims_edited(
                ClaimsEdited(), self._debouncer.bump(Channel.CLAIMS)
            )
            if not applied:
                await self._process_token(self._debouncer.bump(Channel.TOKEN))
            return

        decoded = state.validation.decoded
        algorithm = decoded.algorithm if decoded is not None else None
        if decoded is None or algorithm is None or not is_supported(algorithm):
            await self._process_token(self._debouncer.bump(Channel.TOKEN))
            return

        keys = state.keys
        signature = key_signature(algorithm, keys)
        if signature == state.last_applied_key_signature:
            await self._process_token(self._debouncer.bump(Channel.TOKEN))
            return

        outcome = await self._signer.sign_detailed(decoded.header, decoded.payload, keys)
        if not self._is_fresh(Channel.KEYS, generation) or self._state.keys != keys:
            return
        if outcome.token is None:
            if outcome.error is not None:
                self._state = self._state.model_copy(update={"notice": outcome.error})
            await self._process_token(self._debouncer.bump(Channel.TOKEN))
            return

        logger.info("token_resigned", algorithm=algorithm)
        await self._replace_token(
            outcome.token,
            TokenOrigin.KEYS,
            last_applied_key_signature=signature,
            notice=None,
        )

    async def _on_algorithm_switched(
        self, event: AlgorithmSwitched, generation: int
    ) -> None:
        state = self._state
        decoded = state.validation.decoded
        if decoded is not None:
            header = {**decoded.header, "alg": event.algorithm}
            payload = dict(decoded.payload)
        else:
            header = {"alg": event.algorithm, "typ": DEFAULT_TYP}
            payload = self._default_payload()
        keys = state.keys
        if event.keys is not None:
            keys = keys.model_copy(update=event.keys.model_dump(exclude_defaults=True))
        label = event.label or event.algorithm

        outcome = await self._signer.sign_detailed(header, payload, keys)
        if not self._is_fresh(Channel.ALGORITHM, generation):
            return

        self._state = self._state.model_copy(update={"keys": keys, "editing": False})
        if outcome.token is not None:
            logger.info("algorithm_switched", algorithm=event.algorithm)
            await self._replace_token(
                outcome.token,
                TokenOrigin.ALGORITHM,
                last_applied_key_signature=key_signature(event.algorithm, keys),
                notice=None,
            )
            return

        slot = "secret" if required_slot(event.algorithm) == "secret" else "private"
        segments = codec.encode_header_payload(header, payload)
        placeholder = f"{segments.signing_input}.demo-signature-provide-{slot}-key"
        logger.info("algorithm_switched_unsigned", algorithm=event.algorithm)
        await self._replace_token(
            placeholder,
            TokenOrigin.ALGORITHM,
            notice=f"Loaded {label} - provide {slot} key to generate valid signature",
        )

    # -- pipeline --------------------------------------------------------------

    async def _replace_token(self, token: str, origin: TokenOrigin, **update: Any) -> None:
        generation = self._debouncer.bump(Channel.TOKEN)
        self._state = self._state.model_copy(update={"token": token, **update})
        logger.debug("token_stored", origin=str(origin))
        await self._process_token(generation)

    async def _process_token(self, generation: int) -> None:
        """Decode the current token and verify it with the current keys."""
        state = self._state
        token = state.token
        if not token.strip():
            self._state = state.model_copy(
                update={"validation": ValidationState(format_error=TOKEN_REQUIRED_MESSAGE)}
            )
            return

        decoded = codec.decode(token)
        if isinstance(decoded, DecodeError):
            self._state = state.model_copy(
                update={"validation": ValidationState(format_error=decoded.message)}
            )
            return

        update: dict[str, Any] = {
            "validation": ValidationState(
                is_valid_format=True,
                decoded=decoded,
                algorithm=decoded.algorithm,
                expired=is_expired(decoded.payload, self._clock()),
            )
        }
        if not state.editing:
            update["header_text"] = format_json(decoded.header)
            update["payload_text"] = format_json(decoded.payload)
        self._state = state.model_copy(update=update)

        keys = state.keys
        result = await self._verifier.verify(token, decoded, keys)
        current = self._state
        if (
            not self._is_fresh(Channel.TOKEN, generation)
            or current.token != token
            or current.keys != keys
        ):
            return
        self._state = current.model_copy(
            update={
                "validation": current.validation.model_copy(
                    update={
                        "is_signature_valid": result.status,
                        "signature_error": result.error,
                    }
                )
            }
        )

    def _is_fresh(self, channel: Channel, generation: int) -> bool:
        if self._debouncer.is_current(channel, generation):
            return True
        logger.debug("stale_result_dropped", channel=str(channel), generation=generation)
        return False

    def _default_payload(self) -> dict[str, Any]:
        now = self._clock()
        return {
            "sub": "1234567890",
            "name": "John Doe",
            "iat": now,
            "exp": now + self._settings.default_token_ttl,
        }

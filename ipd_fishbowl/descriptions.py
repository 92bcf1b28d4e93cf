"""
Static display metadata for every strategy in the fishbowl
Used only for tooltips and reports, never by the simulation itself
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional


@dataclass(frozen=True)
class StrategyInfo:
    name: str
    description: str
    reasoning: str = ""
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    real_world: str = ""
    performance: str = ""
    learning_mechanism: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


STRATEGY_INFO: Dict[str, StrategyInfo] = {
    # Classic strategies
    "C_ALWAYS": StrategyInfo(
        name="Always Cooperate",
        description="The altruist - cooperates every round no matter what the opponent does.",
        reasoning="Unconditional trust: kindness is offered in the hope that it will be returned.",
        strengths=["Reaches full mutual cooperation with other nice strategies", "Simple and predictable"],
        weaknesses=["Exploited by any defector", "Never adapts to hostile opponents"],
        real_world="Someone who helps everybody regardless of how they are treated.",
        performance="Great among cooperators, last place whenever defectors are around.",
    ),
    "D_ALWAYS": StrategyInfo(
        name="Always Defect",
        description="The egoist - defects every round to grab the biggest single-round payoff.",
        reasoning="Pure self-interest: assume the other side will betray you and strike first.",
        strengths=["Cannot be exploited", "Profits from naive cooperators"],
        weaknesses=["Mutual defection pays far less than mutual cooperation", "Never builds a relationship"],
        real_world="Someone who always puts themselves first and trusts nobody.",
        performance="Beats unconditional cooperators, stalls against retaliating strategies.",
    ),
    "TFT": StrategyInfo(
        name="Tit for Tat",
        description="The mirror - opens with cooperation, then copies the opponent's previous move.",
        reasoning="Nice, retaliatory, forgiving and easy to read.",
        strengths=["Never defects first", "Punishes defection immediately", "Returns to cooperation at once"],
        weaknesses=["Echoes of a single defection can run forever", "Sensitive to noise"],
        real_world="A fair person who treats you exactly the way you treated them.",
        performance="Winner of Axelrod's first tournament.",
    ),
    "RANDOM": StrategyInfo(
        name="Random",
        description="The coin flipper - cooperates with probability one half every round.",
        reasoning="Unpredictability as a strategy.",
        strengths=["Cannot be read or systematically exploited"],
        weaknesses=["No coherent plan", "Cannot sustain cooperation"],
        real_world="Someone whose behaviour is impossible to anticipate.",
        performance="Mediocre against everyone; mostly a control.",
    ),
    "GRIM": StrategyInfo(
        name="Grim Trigger",
        description="The enforcer - cooperates until the first betrayal, then defects for the rest of the match.",
        reasoning="Full trust until it is broken, then none at all.",
        strengths=["Strong deterrent", "Sustains cooperation with nice opponents"],
        weaknesses=["Never forgives", "One mistake ends cooperation"],
        real_world="Someone who cuts you off permanently after a single betrayal.",
        performance="Excellent while cooperation lasts, poor once triggered.",
    ),
    "PAVLOV": StrategyInfo(
        name="Pavlov (Win-Stay, Lose-Shift)",
        description="The learner - repeats a move that paid well, switches after a poor outcome.",
        reasoning="A reward of R or T keeps the move, a payoff of P or S changes it.",
        strengths=["Recovers from accidental defections", "Exploits unconditional cooperators"],
        weaknesses=["Alternates against Always Defect", "Short memory"],
        real_world="Someone who sticks with what just worked and drops what did not.",
        performance="Robust, especially in noisy populations.",
    ),
    "GTFT": StrategyInfo(
        name="Generous Tit-for-Tat",
        description="Tit for Tat that forgives a defection one time in ten.",
        reasoning="Occasional forgiveness breaks retaliation spirals.",
        strengths=["Escapes mutual-defection echoes", "Still punishes most defections"],
        weaknesses=["Forgiveness can be exploited"],
        real_world="A fair person who sometimes lets things slide.",
        performance="Usually matches or beats Tit for Tat when there is noise.",
    ),

    # Adaptive strategies
    "ADAPTIVE": StrategyInfo(
        name="Adaptive",
        description="Learning agent that tunes its cooperation probabilities from reward feedback.",
        reasoning="Reinforcement: cooperate more when cooperation has paid better, less when defection has.",
        strengths=["Adapts to the population", "Keeps some exploration"],
        weaknesses=["Slow to adapt", "Can overcorrect after one unlucky match"],
        real_world="Someone who learns by trial and error how to treat different people.",
        performance="Starts near random, improves against predictable opponents.",
        learning_mechanism=(
            "After each match compares the average payoff of its cooperative and defecting rounds and "
            "nudges P(coop | opponent cooperated) and P(coop | opponent defected) toward the better "
            "branch with learning rate 0.06."
        ),
    ),
    "QLEARN": StrategyInfo(
        name="Q-Learning Agent",
        description="Tabular Q-learner keyed on the opponent's last three moves.",
        reasoning="Estimate the long-run value of each move in each situation and pick the best.",
        strengths=["Learns opponent-specific responses", "Balances exploration and exploitation"],
        weaknesses=["Needs many rounds to learn", "Explores even when it should not"],
        real_world="A careful analyst who keeps a ledger of what each choice earned.",
        performance="Improves steadily over many matches.",
        learning_mechanism="One-step Q-learning with alpha 0.1, gamma 0.9 and epsilon-greedy exploration at 0.1.",
    ),
    "FREQ": StrategyInfo(
        name="Frequency Analyzer",
        description="Cooperates for five rounds, then cooperates only if the opponent cooperates more than 60% of the time.",
        reasoning="Judge the opponent by its overall track record.",
        strengths=["Ignores isolated defections", "Exploit-resistant against mostly defecting opponents"],
        weaknesses=["Slow to react to sudden changes"],
        real_world="Someone who trusts people based on their reputation.",
        performance="Solid against stable strategies.",
        learning_mechanism="Tracks the opponent's cooperation rate over the current match.",
    ),
    "PATTERN": StrategyInfo(
        name="Pattern Detective",
        description="Learns which move follows short opponent move sequences and answers the predicted move.",
        reasoning="Most opponents repeat themselves; predict and respond in kind.",
        strengths=["Reads periodic opponents", "Memory carries over between matches"],
        weaknesses=["Fooled by randomness", "Needs a few rounds before predicting"],
        real_world="A detective looking for habits.",
        performance="Strong against deterministic strategies.",
        learning_mechanism="Counts the follow-up of every opponent move sequence of length 2 to 4.",
    ),
    "META": StrategyInfo(
        name="Meta-Strategist",
        description="Switches every ten rounds between Cooperate, Defect, Tit for Tat and frequency analysis.",
        reasoning="No single rule is best; use whichever has been paying best.",
        strengths=["Combines several behaviours", "Abandons losing approaches"],
        weaknesses=["Switching can confuse reciprocating opponents"],
        real_world="A manager who reassigns strategy based on quarterly results.",
        performance="Competitive in mixed populations.",
        learning_mechanism="Keeps the running average payoff of each sub-strategy and adopts the best one.",
    ),
}


def get_strategy_info(strategy_id: str) -> StrategyInfo:
    """Look up display metadata, failing loudly for ids nobody registered"""
    try:
        return STRATEGY_INFO[strategy_id]
    except KeyError:
        raise ValueError(f"No description registered for strategy '{strategy_id}'") from None
